from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from gctet.entities.message import (
    Attachment,
    ContextMessage,
    ConversationTurn,
    DispatchResult,
)
from gctet.entities.status import AppStatus
from gctet.services.DispatcherService.dispatcher_service_interface import (
    DispatcherServiceInterface,
)

T = TypeVar("T")

DEFAULT_CONTEXT_WINDOW = 10
DEFAULT_PROMPT = "Diagnostic analysis."


class ChatSession:
    """
    In-memory conversation for a single chat.

    At most one remote call runs at a time. Calls made while the session is
    busy are ignored and return None; they are neither queued nor rejected.
    """

    def __init__(
        self,
        dispatcher: DispatcherServiceInterface,
        logger: logging.Logger,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        default_prompt: str = DEFAULT_PROMPT,
    ) -> None:
        if context_window < 0:
            raise ValueError("context_window must be zero or positive")

        self.dispatcher = dispatcher
        self.logger = logger
        self.context_window = context_window
        self.default_prompt = default_prompt
        self._history: list[ConversationTurn] = []
        self._status: AppStatus = AppStatus.IDLE

    @property
    def history(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._history)

    @property
    def status(self) -> AppStatus:
        return self._status

    @property
    def is_busy(self) -> bool:
        return self._status is not AppStatus.IDLE

    def build_context(self) -> list[ContextMessage]:
        if self.context_window == 0:
            return []
        return [turn.to_context() for turn in self._history[-self.context_window :]]

    def last_reply(self) -> ConversationTurn | None:
        for turn in reversed(self._history):
            if turn.role == "assistant":
                return turn
        return None

    async def submit_turn(
        self, prompt: str, attachments: Sequence[Attachment] = ()
    ) -> DispatchResult | None:
        if self.is_busy:
            self.logger.debug("Session busy, ignoring submission")
            return None

        if not prompt.strip() and not attachments:
            self.logger.debug("Ignoring empty submission")
            return None

        # Context is taken before the new turn is appended.
        context = self.build_context()
        owned: tuple[Attachment, ...] = tuple(
            {"data": attachment["data"], "mime_type": attachment["mime_type"]}
            for attachment in attachments
        )
        self._history.append(
            ConversationTurn(role="user", content=prompt, attachments=owned)
        )

        result = await self._run(
            AppStatus.THINKING,
            lambda: self.dispatcher.dispatch(
                prompt or self.default_prompt, context, owned
            ),
        )

        image_data = result.get("image_data")
        reply_attachments: tuple[Attachment, ...] = (
            ({"data": image_data, "mime_type": "image/png"},) if image_data else ()
        )
        self._history.append(
            ConversationTurn(
                role="assistant",
                content=result["content"],
                attachments=reply_attachments,
                is_image=result["is_image"],
            )
        )

        self.logger.info(
            "Turn settled (image=%s), history size %s",
            result["is_image"],
            len(self._history),
        )
        return result

    async def translate_last_reply(self, language: str) -> str | None:
        reply = self.last_reply()
        if self.is_busy or reply is None:
            return None
        return await self._run(
            AppStatus.TRANSLATING,
            lambda: self.dispatcher.translate(reply.content, language),
        )

    async def speak_last_reply(self) -> str | None:
        reply = self.last_reply()
        if self.is_busy or reply is None:
            return None
        return await self._run(
            AppStatus.SPEAKING,
            lambda: self.dispatcher.synthesize_speech(reply.content),
        )

    def reset(self) -> bool:
        """Clear the history. Returns False when a call is in flight."""
        if self.is_busy:
            return False
        self._history.clear()
        return True

    async def _run(
        self, status: AppStatus, call: Callable[[], Awaitable[T]]
    ) -> T:
        self._status = status
        try:
            return await call()
        finally:
            self._status = AppStatus.IDLE
