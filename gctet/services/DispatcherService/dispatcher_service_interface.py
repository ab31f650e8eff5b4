from abc import ABC, abstractmethod
from collections.abc import Sequence

from gctet.entities.message import Attachment, ContextMessage, DispatchResult


class DispatcherServiceInterface(ABC):
    @abstractmethod
    def is_image_request(self, prompt: str) -> bool:
        """Return True when the prompt should be answered with a generated image."""

    @abstractmethod
    async def dispatch(
        self,
        prompt: str,
        context: Sequence[ContextMessage],
        attachments: Sequence[Attachment] = (),
    ) -> DispatchResult:
        """
        Answer one user turn.

        Never raises: remote failures end in the fixed fallback result.
        """

    @abstractmethod
    async def translate(self, text: str, target_language: str) -> str | None:
        """Translate HTML-bearing text, keeping <b>, <i> and <p> tags. None on failure."""

    @abstractmethod
    async def synthesize_speech(self, text: str) -> str | None:
        """Return base64 encoded PCM audio for the text, or None on failure."""
