import logging

from gctet.services.ChatSessionService.chat_session import (
    DEFAULT_CONTEXT_WINDOW,
    ChatSession,
)
from gctet.services.ChatSessionService.chat_session_service_interface import (
    ChatSessionServiceInterface,
)
from gctet.services.DispatcherService.dispatcher_service_interface import (
    DispatcherServiceInterface,
)


class ChatSessionService(ChatSessionServiceInterface):
    def __init__(
        self,
        dispatcher: DispatcherServiceInterface,
        logger: logging.Logger,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
    ) -> None:
        self.dispatcher = dispatcher
        self.logger = logger
        self.context_window = context_window
        self._sessions: dict[int, ChatSession] = {}

    def get_session(self, chat_id: int) -> ChatSession:
        session = self._sessions.get(chat_id)
        if session is None:
            session = ChatSession(
                dispatcher=self.dispatcher,
                logger=self.logger,
                context_window=self.context_window,
            )
            self._sessions[chat_id] = session
            self.logger.info("Opened chat session for %s", chat_id)
        return session
