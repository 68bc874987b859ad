from loguru import logger
from rich.console import Console

from dexflow.application.commands.base import SubmitCommand
from dexflow.application.dispatch.dispatcher import JobState
from dexflow.application.events.broadcaster import QueueSubscriber
from dexflow.application.services.order_service import OrderService
from dexflow.shared.exceptions import ValidationError

STATUS_STYLES = {
    "queued": "dim",
    "routing": "cyan",
    "building": "blue",
    "submitted": "magenta",
    "confirmed": "green",
    "failed": "red",
}


def _print_event(console: Console, payload: dict) -> None:
    status = payload["status"]
    style = STATUS_STYLES.get(status, "white")
    meta = payload.get("meta") or {}
    details = ""
    if "chosen" in meta and status == "routing":
        details = (
            f" A={meta['quoteA']['price']:.6f} B={meta['quoteB']['price']:.6f}"
            f" -> {meta['chosen']['venue']}"
        )
    elif status == "confirmed":
        details = f" {meta['settlementRef']} @ {meta['executedPrice']:.6f}"
    elif status == "failed":
        details = f" {meta.get('error', '')}"
    console.print(
        f"[{style}]#{payload['attempt']} {status.upper():<10}[/{style}]{details}"
    )


def _job_finished(service: OrderService, order_id: str) -> bool:
    record = service.dispatcher.job(order_id)
    return record is None or record.state == JobState.FAILED


async def handle_submit(
    service: OrderService, command: SubmitCommand, console: Console
) -> int:
    """Submit an order and stream its events until the job settles

    Returns:
        0 if the order confirmed, 1 otherwise
    """
    payload = {
        "side": command.side,
        "tokenIn": command.token_in,
        "tokenOut": command.token_out,
        "amount": command.amount,
    }
    if command.slippage is not None:
        payload["slippage"] = command.slippage

    subscriber = QueueSubscriber()
    try:
        order_id = service.submit(payload, subscriber)
    except ValidationError as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1

    console.print(f"[cyan]Order {order_id} submitted[/cyan]")
    await service.start()

    try:
        while not _job_finished(service, order_id):
            try:
                _print_event(console, await subscriber.receive(timeout=0.25))
            except TimeoutError:
                continue
        for payload in subscriber.drain():
            _print_event(console, payload)
    finally:
        subscriber.close()

    record = service.dispatcher.job(order_id)
    if record is not None:
        logger.error(f"Order {order_id} gave up after {record.attempts} attempts")
        return 1
    return 0
