from rich.console import Console
from rich.table import Table

from dexflow.application.commands.base import ListCommand, StatusCommand
from dexflow.application.services.order_service import OrderService
from dexflow.domain.models import Order, OrderStatus


def _order_table(orders: list[Order], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Order", style="cyan")
    table.add_column("Side")
    table.add_column("Pair")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    table.add_column("Attempt", justify="right")
    table.add_column("Executed", justify="right")
    table.add_column("Detail")

    for order in orders:
        executed = (
            f"{order.meta.executed_price:.6f}"
            if order.meta.executed_price is not None
            else "-"
        )
        table.add_row(
            order.id,
            order.side.value,
            f"{order.token_in}->{order.token_out}",
            f"{order.amount:g}",
            order.status.value,
            str(order.attempt),
            executed,
            order.meta.settlement_ref or order.meta.error or "",
        )
    return table


async def handle_status(
    service: OrderService, command: StatusCommand, console: Console
) -> int:
    order = service.get_order(command.order_id)
    if order is None:
        console.print(f"[red]Order not found: {command.order_id}[/red]")
        return 1

    console.print(_order_table([order], "Order status"))
    return 0


async def handle_list(
    service: OrderService, command: ListCommand, console: Console
) -> int:
    status = None
    if command.status:
        try:
            status = OrderStatus(command.status)
        except ValueError:
            console.print(f"[red]Unknown status: {command.status}[/red]")
            return 1

    orders = service.repository.list_orders(status)
    console.print(_order_table(orders, f"Orders ({len(orders)})"))
    return 0
