"""HTTP quote adapter for venues exposing a REST quoting endpoint"""

import httpx
from loguru import logger

from dexflow.domain.models import Quote, Venue
from dexflow.shared.exceptions import QuoteUnavailable


class HttpQuoteSource:
    """Fetch quotes from ``GET {base_url}/quote``

    The endpoint is expected to answer with ``{"price": float, "fee": float}``.
    """

    def __init__(
        self,
        venue: Venue,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ) -> None:
        self.venue = venue
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_quote(
        self, token_in: str, token_out: str, amount: float
    ) -> Quote:
        params = {"inputMint": token_in, "outputMint": token_out, "amount": amount}
        try:
            response = await self._client.get(f"{self.base_url}/quote", params=params)
        except httpx.RequestError as e:
            logger.warning(f"{self.venue.value} quote request failed: {e}")
            raise QuoteUnavailable(f"{self.venue.value}: {e}") from e

        if response.status_code != 200:
            raise QuoteUnavailable(
                f"{self.venue.value}: quote request failed with {response.status_code}"
            )

        try:
            body = response.json()
            return Quote(
                price=float(body["price"]),
                fee=float(body.get("fee", 0.0)),
                venue=self.venue,
            )
        except (ValueError, KeyError, TypeError) as e:
            raise QuoteUnavailable(
                f"{self.venue.value}: malformed quote response: {e}"
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
