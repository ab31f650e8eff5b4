from gctet.dependencies.components import get_components
from gctet.services.TelegramService.telegram_service_interface import (
    TelegramServiceInterface,
)
from gctet.dependencies.services import get_telegram_service


async def bootstrap_bot(
    env: str = "development",
    config_path: str = "configuration",
) -> TelegramServiceInterface:
    components = get_components(env=env, config_path=config_path)
    return await get_telegram_service(components)
