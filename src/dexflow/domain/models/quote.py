"""Quote value objects"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Venue(str, Enum):
    """Liquidity venues a quote can come from"""

    VENUE_A = "venue_a"
    VENUE_B = "venue_b"


@dataclass(frozen=True)
class Quote:
    """Price and fee offered by one venue for one routing attempt"""

    price: float
    fee: float
    venue: Venue

    def __post_init__(self):
        if self.price <= 0:
            raise ValueError(f"Quote price must be positive, got {self.price}")
        if not 0 <= self.fee < 1:
            raise ValueError(f"Quote fee must be in [0, 1), got {self.fee}")

    def to_dict(self) -> dict[str, Any]:
        return {"price": self.price, "fee": self.fee, "venue": self.venue.value}


@dataclass(frozen=True)
class RouteResult:
    """Both competing quotes plus the one selected for execution"""

    quote_a: Quote
    quote_b: Quote
    chosen: Quote


@dataclass(frozen=True)
class Settlement:
    """Outcome of a successful swap execution"""

    settlement_ref: str
    executed_price: float

    def __post_init__(self):
        if self.executed_price <= 0:
            raise ValueError(
                f"Executed price must be positive, got {self.executed_price}"
            )
