from abc import ABC, abstractmethod

from gctet.services.ChatSessionService.chat_session import ChatSession


class ChatSessionServiceInterface(ABC):
    @abstractmethod
    def get_session(self, chat_id: int) -> ChatSession:
        """Return the in-memory session for a chat, creating it on first use."""
