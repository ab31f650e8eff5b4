from abc import ABC, abstractmethod

from gctet.entities.profile import UserProfile


class ProfileServiceInterface(ABC):
    @abstractmethod
    def create_profile(self, user_id: int, name: str, **details: str) -> UserProfile:
        pass

    @abstractmethod
    def get_profile(self, user_id: int) -> UserProfile | None:
        pass

    @abstractmethod
    def update_picture(self, user_id: int, picture: str) -> UserProfile | None:
        pass

    @abstractmethod
    def delete_profile(self, user_id: int) -> None:
        pass
