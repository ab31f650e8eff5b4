import os
import sys
from pathlib import Path
from threading import Lock
from typing import Any, TypeVar, cast

from google import genai
from openinference.instrumentation.google_genai import GoogleGenAIInstrumentor
from telethon import TelegramClient
from dotenv import load_dotenv

from gctet.components.configuration.configuration import Configuration
from gctet.components.configuration.configuration_interface import (
    ConfigurationInterface,
)
from gctet.components.logger.logger import Logger
from gctet.components.logger.logger_interface import LoggerInterface


load_dotenv()


def _is_test_environment() -> bool:
    """
    Check if we are running in a test environment.

    Returns:
        True if running under pytest or if TESTING env var is set, False otherwise.
    """
    if any("pytest" in arg for arg in sys.argv):
        return True

    if os.getenv("TESTING", "").lower() in ("true", "1", "yes"):
        return True

    return False


def _validate_otel_env_vars() -> None:
    """
    Validate OpenTelemetry/Langfuse environment variables for instrumentation.

    Langfuse native integration (`LANGFUSE_PUBLIC_KEY`, `LANGFUSE_SECRET_KEY`
    and `LANGFUSE_BASE_URL` all set) skips validation. Otherwise both
    `OTEL_EXPORTER_OTLP_ENDPOINT` and `OTEL_EXPORTER_OTLP_HEADERS` are required.

    Raises:
        RuntimeError: If the manual OTLP variables are missing or empty.
    """

    otel_endpoint: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "").strip()
    otel_headers: str = os.getenv("OTEL_EXPORTER_OTLP_HEADERS", "").strip()

    langfuse_public_key: str = os.getenv("LANGFUSE_PUBLIC_KEY", "").strip()
    langfuse_secret_key: str = os.getenv("LANGFUSE_SECRET_KEY", "").strip()
    langfuse_base_url: str = os.getenv("LANGFUSE_BASE_URL", "").strip()

    if langfuse_public_key and langfuse_secret_key and langfuse_base_url:
        return

    if not otel_endpoint:
        raise RuntimeError(
            "OTEL_EXPORTER_OTLP_ENDPOINT environment variable is not set or is empty. "
            "Please set it with a valid OTLP endpoint URL."
        )

    if not otel_headers:
        raise RuntimeError(
            "OTEL_EXPORTER_OTLP_HEADERS environment variable is not set or is empty, "
            "and LANGFUSE_PUBLIC_KEY/LANGFUSE_SECRET_KEY/LANGFUSE_BASE_URL are not all available. "
            "Please set OTEL_EXPORTER_OTLP_HEADERS (e.g., 'Authorization=Basic <base64_credentials>') "
            "or configure the Langfuse keys."
        )


def _tracing_enabled() -> bool:
    return os.getenv("LANGFUSE_TRACING_ENABLED", "true").lower() not in ("false", "0", "no")


# Skip validation and instrumentation in test environment
if not _is_test_environment() and _tracing_enabled():
    _validate_otel_env_vars()

    GoogleGenAIInstrumentor().instrument()

T = TypeVar("T")


class ComponentsMeta(type):
    _instances: dict[tuple[type, str], "Components"] = {}
    _lock: Lock = Lock()

    def __call__(cls, *args, **kwargs):
        env = args[0] if args else kwargs.get("env")
        if env is None:
            raise ValueError("Environment must be provided")

        env_key = str(env)
        key = (cls, env_key)
        with cls._lock:
            if key not in cls._instances:
                instance = super().__call__(*args, **kwargs)
                cls._instances[key] = instance
        return cls._instances[key]


class Components(metaclass=ComponentsMeta):
    def __init__(self, env: str, config_path: str) -> None:
        self.__env: str = env
        root_dir: str = str(Path(__file__).resolve().parents[2])
        self.__config_path: str = os.path.join(root_dir, config_path)
        self.__components: dict[type[Any], Any] = self.__bootstrap_components()

    def __bootstrap_components(self) -> dict[type[Any], Any]:
        if self.__env in {"development", "staging", "production"}:
            return self.__get_components()

        raise ValueError(f"Invalid environment: {self.__env}")

    def __get_components(self) -> dict[type[Any], Any]:
        configuration: ConfigurationInterface = Configuration(
            self.__env, self.__config_path
        )

        logger: LoggerInterface = Logger(
            log_format=configuration.get_configuration("LOG_FORMAT", str, default=""),
            log_level=configuration.get_configuration("LOG_LEVEL", str, default="INFO"),
        )
        _logger_instance = logger.get_logger("Components")

        # One Gen AI client for the whole process
        api_key: str = configuration.get_configuration(
            "GEMINI_API_KEY",
            str,
            default=configuration.get_configuration("API_KEY", str, default=""),
        )
        if not api_key:
            raise ValueError(
                "GEMINI_API_KEY (or API_KEY) must be set to reach the Gemini API."
            )
        genai_client: genai.Client = genai.Client(api_key=api_key)

        telegram_api_id: int = configuration.get_configuration("TELEGRAM_API_ID", int)
        telegram_api_hash: str = configuration.get_configuration(
            "TELEGRAM_APP_HASH", str
        )
        telegram_client: TelegramClient = TelegramClient(
            "gctet_bot", telegram_api_id, telegram_api_hash
        )

        _logger_instance.info("Components bootstrapped for %s", self.__env)

        components: dict[type[Any], Any] = {
            ConfigurationInterface: configuration,
            LoggerInterface: logger,
            genai.Client: genai_client,
            TelegramClient: telegram_client,
        }

        return components

    def get_component(self, component_name: type[T]) -> T:
        if component_name not in self.__components:
            raise ValueError(f"Component {component_name} not found")

        return cast(T, self.__components[component_name])

    def get_config_path(self) -> str:
        return self.__config_path
