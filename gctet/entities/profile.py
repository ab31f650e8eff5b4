from typing import NotRequired, TypedDict


class UserProfile(TypedDict):
    """Engineer profile kept in memory for the lifetime of the process."""

    name: str
    id_number: str
    profile_pic: str | None
    city: NotRequired[str]
    email: NotRequired[str]
