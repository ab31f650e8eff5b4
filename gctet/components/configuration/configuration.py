import json
import os
from pathlib import Path
from typing import Any, TypeVar, cast

import yaml
from dotenv import load_dotenv

from gctet.components.configuration.configuration_interface import (
    _MISSING,
    ConfigurationInterface,
)

T = TypeVar("T")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class Configuration(ConfigurationInterface):
    """
    Environment-aware configuration.

    Lookup order for a key: process environment (after loading .env), then
    ``<config_path>/<env>.yaml``, then the caller's default.
    """

    def __init__(self, env: str, config_path: str) -> None:
        load_dotenv()
        self.env = env
        self.config_path = config_path
        self._values: dict[str, Any] = self._load_file(
            Path(config_path) / f"{env}.yaml"
        )

    @staticmethod
    def _load_file(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        with path.open(encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        return data

    def get_configuration(
        self, key: str, value_type: type[T], default: Any = _MISSING
    ) -> T:
        raw = os.getenv(key)
        value: Any = raw if raw is not None and raw != "" else self._values.get(key)

        if value is None:
            if default is _MISSING:
                raise KeyError(f"Configuration key {key} is not set")
            return cast(T, default)

        return cast(T, self._convert(key, value, value_type))

    @staticmethod
    def _convert(key: str, value: Any, value_type: type) -> Any:
        if type(value) is value_type:
            return value

        if value_type is bool:
            lowered = str(value).strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            raise ValueError(f"Configuration key {key} is not a boolean: {value!r}")

        if value_type is list:
            if isinstance(value, str):
                stripped = value.strip()
                if stripped.startswith("["):
                    return list(json.loads(stripped))
                return [item.strip() for item in stripped.split(",") if item.strip()]
            return list(value)

        try:
            return value_type(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Configuration key {key} cannot be read as {value_type.__name__}: {value!r}"
            ) from exc
