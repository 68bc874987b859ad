from dataclasses import dataclass


@dataclass
class Command:
    """Base command class"""

    name: str


@dataclass
class SubmitCommand(Command):
    """Submit one swap order and follow it to a terminal state"""

    side: str = "buy"
    token_in: str = ""
    token_out: str = ""
    amount: str = "0"
    slippage: str | None = None


@dataclass
class StatusCommand(Command):
    """Show the persisted state of one order"""

    order_id: str = ""


@dataclass
class ListCommand(Command):
    """List persisted orders, optionally by status"""

    status: str | None = None
