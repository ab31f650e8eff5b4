import random

from gctet.entities.profile import UserProfile
from gctet.services.ProfileService.profile_service_interface import (
    ProfileServiceInterface,
)

ID_PREFIX = "GCT-"
_OPTIONAL_FIELDS = ("email", "city")


class ProfileService(ProfileServiceInterface):
    """Engineer profiles held in memory only; nothing survives a restart."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self._profiles: dict[int, UserProfile] = {}

    def generate_id_number(self) -> str:
        return f"{ID_PREFIX}{self.rng.randint(1000, 9999)}"

    def create_profile(self, user_id: int, name: str, **details: str) -> UserProfile:
        name = name.strip()
        if not name:
            raise ValueError("Profile name must not be blank")

        existing = self._profiles.get(user_id)
        profile: UserProfile = {
            "name": name,
            "id_number": existing["id_number"] if existing else self.generate_id_number(),
            "profile_pic": existing["profile_pic"] if existing else None,
        }
        for key in _OPTIONAL_FIELDS:
            value = (details.get(key) or "").strip()
            if value:
                profile[key] = value

        self._profiles[user_id] = profile
        return profile

    def get_profile(self, user_id: int) -> UserProfile | None:
        return self._profiles.get(user_id)

    def update_picture(self, user_id: int, picture: str) -> UserProfile | None:
        profile = self._profiles.get(user_id)
        if profile is None:
            return None
        updated: UserProfile = {**profile, "profile_pic": picture}
        self._profiles[user_id] = updated
        return updated

    def delete_profile(self, user_id: int) -> None:
        self._profiles.pop(user_id, None)
