"""Routing engine - prices an order on both venues and picks the best quote"""

import asyncio

from loguru import logger

from dexflow.domain.models import Order, OrderSide, Quote, RouteResult
from dexflow.infrastructure.venues.protocols import QuoteSource
from dexflow.shared.exceptions import QuoteUnavailable


def select_quote(side: OrderSide, quote_a: Quote, quote_b: Quote) -> Quote:
    """Pick the better quote for the requester's side

    Buy takes the lower price, sell the higher. Ties go to venue A.
    """
    if side == OrderSide.BUY:
        return quote_b if quote_b.price < quote_a.price else quote_a
    return quote_b if quote_b.price > quote_a.price else quote_a


class RoutingEngine:
    """Runs both quote sources concurrently and joins their results"""

    def __init__(
        self,
        source_a: QuoteSource,
        source_b: QuoteSource,
        timeout: float | None = None,
    ) -> None:
        """
        Args:
            source_a: Venue A quote source (wins ties)
            source_b: Venue B quote source
            timeout: Optional deadline in seconds for the joined fetch
        """
        self.source_a = source_a
        self.source_b = source_b
        self.timeout = timeout

    async def route(self, order: Order, side: OrderSide | None = None) -> RouteResult:
        """Fetch both quotes and choose one

        Args:
            order: Order to price
            side: Side to optimise for (defaults to order.side)

        Returns:
            RouteResult with both quotes and the chosen one

        Raises:
            QuoteUnavailable: If either venue fails or the deadline passes
        """
        side = side or order.side
        tasks = [
            asyncio.ensure_future(
                source.fetch_quote(order.token_in, order.token_out, order.amount)
            )
            for source in (self.source_a, self.source_b)
        ]

        try:
            quote_a, quote_b = await asyncio.wait_for(
                asyncio.gather(*tasks), timeout=self.timeout
            )
        except TimeoutError as e:
            raise QuoteUnavailable(
                f"Quote fetch timed out after {self.timeout}s"
            ) from e
        except QuoteUnavailable:
            raise
        except Exception as e:
            raise QuoteUnavailable(f"Quote fetch failed: {e}") from e
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        chosen = select_quote(side, quote_a, quote_b)
        logger.info(
            f"Order {order.id} routed ({side.value}): "
            f"{quote_a.venue.value}={quote_a.price:.6f} "
            f"{quote_b.venue.value}={quote_b.price:.6f} -> {chosen.venue.value}"
        )
        return RouteResult(quote_a=quote_a, quote_b=quote_b, chosen=chosen)
