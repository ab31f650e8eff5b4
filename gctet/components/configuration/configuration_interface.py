from abc import ABC, abstractmethod
from typing import Any, TypeVar

T = TypeVar("T")

_MISSING: Any = object()


class ConfigurationInterface(ABC):
    @abstractmethod
    def get_configuration(
        self, key: str, value_type: type[T], default: Any = _MISSING
    ) -> T:
        """
        Return the value for key converted to value_type.

        Raises KeyError when the key is unset and no default is given.
        """
