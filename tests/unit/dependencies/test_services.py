import logging
from typing import Any, cast
from unittest.mock import MagicMock

import pytest
from google import genai
from telethon import TelegramClient

from gctet.bootstrap.components import Components
from gctet.components.configuration.configuration_interface import (
    ConfigurationInterface,
)
from gctet.components.logger.logger_interface import LoggerInterface
from gctet.dependencies.services import (
    get_chat_session_service,
    get_dispatcher_service,
    get_telegram_service,
)
from gctet.services.ChatSessionService.chat_session_service import ChatSessionService
from gctet.services.DispatcherService.dispatcher_service import (
    DEFAULT_SYSTEM_INSTRUCTION,
    DispatcherService,
)
from gctet.services.TelegramService.telegram_service import TelegramService


class DictConfiguration(ConfigurationInterface):
    def __init__(self, values: dict[str, Any]) -> None:
        self.values = values

    def get_configuration(self, key, value_type, default=None):
        if key in self.values:
            return self.values[key]
        if default is None:
            raise KeyError(key)
        return default


class StubLogger(LoggerInterface):
    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)


class StubComponents:
    def __init__(self, values: dict[str, Any]) -> None:
        self.registry: dict[Any, Any] = {
            ConfigurationInterface: DictConfiguration(values),
            LoggerInterface: StubLogger(),
            genai.Client: MagicMock(),
            TelegramClient: MagicMock(),
        }

    def get_component(self, component_name):
        return self.registry[component_name]


@pytest.mark.unit
class TestServiceFactories:
    def test_dispatcher_uses_configuration(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        stub = StubComponents(
            {
                "TEXT_MODEL_NAME": "text-x",
                "IMAGE_KEYWORDS": ["wiring plan"],
                "LLM_TEMPERATURE": 0.3,
            }
        )

        dispatcher = get_dispatcher_service(cast(Components, stub))

        assert isinstance(dispatcher, DispatcherService)
        assert dispatcher.client is stub.registry[genai.Client]
        assert dispatcher.text_model_name == "text-x"
        assert dispatcher.image_model_name == "gemini-2.5-flash-image"
        assert dispatcher.temperature == 0.3
        assert dispatcher.system_instruction == DEFAULT_SYSTEM_INSTRUCTION
        assert dispatcher.is_image_request("send the wiring plan") is True
        assert dispatcher.is_image_request("draw a diagram") is False

    def test_prompt_file_overrides_system_instruction(
        self, tmp_path, monkeypatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "gctet.prompt").write_text("Custom persona", encoding="utf-8")

        dispatcher = get_dispatcher_service(cast(Components, StubComponents({})))

        assert cast(DispatcherService, dispatcher).system_instruction == "Custom persona"

    def test_chat_session_service_uses_context_window(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)

        service = get_chat_session_service(
            cast(Components, StubComponents({"CONTEXT_WINDOW": 6}))
        )

        assert isinstance(service, ChatSessionService)
        assert service.get_session(1).context_window == 6

    @pytest.mark.asyncio
    async def test_telegram_service_registers_handler(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        stub = StubComponents({"TELEGRAM_BOT_TOKEN": "123:abc"})

        service = await get_telegram_service(cast(Components, stub))

        assert isinstance(service, TelegramService)
        assert service.command_prefix == "/gct"
        assert service.bot_token == "123:abc"
        stub.registry[TelegramClient].add_event_handler.assert_called_once()

    @pytest.mark.asyncio
    async def test_telegram_service_requires_bot_token(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)

        with pytest.raises(KeyError):
            await get_telegram_service(cast(Components, StubComponents({})))
