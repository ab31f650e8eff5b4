from abc import ABC, abstractmethod


class TelegramServiceInterface(ABC):
    @abstractmethod
    async def start(self) -> None:
        """Log in with the bot token and route chat messages until disconnected."""
        raise NotImplementedError
