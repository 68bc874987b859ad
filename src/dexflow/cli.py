import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from dexflow.application.services.command_dispatcher import CommandDispatcher
from dexflow.application.services.order_service import OrderService
from dexflow.core.config import Config
from dexflow.shared.exceptions import ConfigurationError


def main() -> int:
    """CLI entry point for the order pipeline

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    load_dotenv()
    logger.add(
        "logs/dexflow_{time}.log",
        rotation="1 day",
        retention="30 days",
        compression="gz",
        level="INFO",
    )

    try:
        config = Config.from_env()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    service = OrderService(config)
    dispatcher = CommandDispatcher(service)

    async def run():
        try:
            return await dispatcher.dispatch(sys.argv)
        finally:
            await service.stop()

    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        logger.warning("Stopped manually.")
        return 1
    except Exception as e:
        logger.exception(f"Unhandled exception: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
