from pathlib import Path

from google import genai
from telethon import TelegramClient

from gctet.bootstrap.components import Components
from gctet.components.configuration.configuration_interface import (
    ConfigurationInterface,
)
from gctet.components.logger.logger_interface import LoggerInterface
from gctet.services.ChatSessionService.chat_session_service import ChatSessionService
from gctet.services.ChatSessionService.chat_session_service_interface import (
    ChatSessionServiceInterface,
)
from gctet.services.DispatcherService.dispatcher_service import (
    DEFAULT_SYSTEM_INSTRUCTION,
    DispatcherService,
)
from gctet.services.DispatcherService.dispatcher_service_interface import (
    DispatcherServiceInterface,
)
from gctet.services.DispatcherService.intent_classifier import (
    DEFAULT_IMAGE_KEYWORDS,
    KeywordIntentClassifier,
)
from gctet.services.ProfileService.profile_service import ProfileService
from gctet.services.ProfileService.profile_service_interface import (
    ProfileServiceInterface,
)
from gctet.services.TelegramService.telegram_service import TelegramService
from gctet.services.TelegramService.telegram_service_interface import (
    TelegramServiceInterface,
)


def get_dispatcher_service(components: Components) -> DispatcherServiceInterface:
    """
    Create the conversation dispatcher around the process-wide Gen AI client.
    """
    configuration = components.get_component(ConfigurationInterface)

    try:
        system_instruction = Path("gctet.prompt").read_text(encoding="utf-8")
    except FileNotFoundError:
        system_instruction = configuration.get_configuration(
            "SYSTEM_PROMPT", str, default=DEFAULT_SYSTEM_INSTRUCTION
        )

    keywords = configuration.get_configuration(
        "IMAGE_KEYWORDS", list, default=list(DEFAULT_IMAGE_KEYWORDS)
    )

    temperature = configuration.get_configuration("LLM_TEMPERATURE", float, default=0.1)

    return DispatcherService(
        client=components.get_component(genai.Client),
        logger=components.get_component(LoggerInterface).get_logger(
            "DispatcherService"
        ),
        text_model_name=configuration.get_configuration(
            "TEXT_MODEL_NAME", str, default="gemini-3-flash-preview"
        ),
        image_model_name=configuration.get_configuration(
            "IMAGE_MODEL_NAME", str, default="gemini-2.5-flash-image"
        ),
        tts_model_name=configuration.get_configuration(
            "TTS_MODEL_NAME", str, default="gemini-2.5-flash-preview-tts"
        ),
        voice_name=configuration.get_configuration(
            "TTS_VOICE_NAME", str, default="Kore"
        ),
        temperature=float(temperature),
        system_instruction=system_instruction,
        intent_classifier=KeywordIntentClassifier(keywords),
    )


def get_chat_session_service(components: Components) -> ChatSessionServiceInterface:
    configuration = components.get_component(ConfigurationInterface)
    context_window = configuration.get_configuration("CONTEXT_WINDOW", int, default=10)

    return ChatSessionService(
        dispatcher=get_dispatcher_service(components),
        logger=components.get_component(LoggerInterface).get_logger("ChatSession"),
        context_window=context_window,
    )


def get_profile_service(components: Components) -> ProfileServiceInterface:
    return ProfileService()


async def get_telegram_service(components: Components) -> TelegramServiceInterface:
    configuration = components.get_component(ConfigurationInterface)

    prefix: str = configuration.get_configuration(
        "COMMAND_PREFIX", str, default="/gct"
    )
    bot_token: str = configuration.get_configuration("TELEGRAM_BOT_TOKEN", str)

    return await TelegramService.create(
        command_prefix=prefix,
        telegram_client=components.get_component(TelegramClient),
        logger=components.get_component(LoggerInterface).get_logger("TelegramService"),
        chat_sessions=get_chat_session_service(components),
        profile_service=get_profile_service(components),
        bot_token=bot_token,
    )
