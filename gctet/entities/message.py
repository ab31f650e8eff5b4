from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, NotRequired, TypedDict


class Attachment(TypedDict):
    """Binary payload encoded as a data URL (``data:<mime>;base64,<payload>``)."""

    data: str
    mime_type: str


class ContextMessage(TypedDict):
    """Prior turn forwarded to the model as conversation context."""

    role: Literal["user", "assistant"]
    content: str


class DispatchResult(TypedDict):
    """Normalized outcome of a single dispatch."""

    content: str
    is_image: bool
    image_data: NotRequired[str]


@dataclass(frozen=True)
class ConversationTurn:
    """One user message or assistant reply. Immutable once appended."""

    role: Literal["user", "assistant"]
    content: str
    attachments: tuple[Attachment, ...] = ()
    is_image: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_context(self) -> ContextMessage:
        return {"role": self.role, "content": self.content}
