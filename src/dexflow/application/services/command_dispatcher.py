from loguru import logger
from rich.console import Console

from dexflow.application.commands.base import (
    ListCommand,
    StatusCommand,
    SubmitCommand,
)
from dexflow.application.commands.status import handle_list, handle_status
from dexflow.application.commands.submit import handle_submit


class CommandDispatcher:
    """Dispatches CLI commands to appropriate handlers"""

    def __init__(self, service, console: Console | None = None) -> None:
        self.service = service
        self.console = console or Console()
        self._handlers = {
            "submit": self._handle_submit,
            "status": self._handle_status,
            "list": self._handle_list,
        }

    async def dispatch(self, argv: list[str]) -> int:
        """Parse and execute command

        Args:
            argv: Command line arguments (sys.argv)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        if len(argv) < 2:
            self._print_usage()
            return 1

        method = argv[1]
        handler = self._handlers.get(method)

        if handler is None:
            logger.error(f"Unknown method: {method}")
            self._print_usage()
            return 1

        return await handler(argv)

    def _print_usage(self) -> None:
        logger.error(
            "Usage: dexflow submit <side> <token_in> <token_out> <amount> [slippage%]"
            " | status <order_id> | list [status]"
        )

    async def _handle_submit(self, argv: list[str]) -> int:
        if len(argv) < 6:
            self._print_usage()
            return 1
        command = SubmitCommand(
            name="submit",
            side=argv[2],
            token_in=argv[3],
            token_out=argv[4],
            amount=argv[5],
            slippage=argv[6] if len(argv) > 6 else None,
        )
        return await handle_submit(self.service, command, self.console)

    async def _handle_status(self, argv: list[str]) -> int:
        if len(argv) < 3:
            self._print_usage()
            return 1
        command = StatusCommand(name="status", order_id=argv[2])
        return await handle_status(self.service, command, self.console)

    async def _handle_list(self, argv: list[str]) -> int:
        status = argv[2] if len(argv) > 2 else None
        command = ListCommand(name="list", status=status)
        return await handle_list(self.service, command, self.console)
