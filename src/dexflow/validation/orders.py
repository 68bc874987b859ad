"""Pydantic models for order submission validation

Payloads arriving from the transport layer are validated here before an
order is created or enqueued.
"""

from collections.abc import Iterable
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from dexflow.shared.constants import DEFAULT_SLIPPAGE_PERCENT, SUPPORTED_ASSETS
from dexflow.shared.exceptions import ValidationError


class OrderRequest(BaseModel):
    """Request model for a swap order"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    side: Literal["buy", "sell"] = Field(..., description="Order side")
    token_in: str = Field(
        ..., alias="tokenIn", min_length=1, description="Asset given"
    )
    token_out: str = Field(
        ..., alias="tokenOut", min_length=1, description="Asset received"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount of token_in to swap",
    )
    slippage: float = Field(
        DEFAULT_SLIPPAGE_PERCENT,
        ge=0,
        le=100,
        allow_inf_nan=False,
        description="Slippage tolerance in percent",
    )

    @field_validator("side", mode="before")
    @classmethod
    def normalise_side(cls, v):
        """Accept BUY/Sell etc."""
        return v.lower() if isinstance(v, str) else v

    @field_validator("token_in", "token_out")
    @classmethod
    def normalise_token(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_distinct_tokens(self):
        """Ensure the swap exchanges two different assets"""
        if self.token_in == self.token_out:
            raise ValueError("tokenIn and tokenOut must differ")
        return self


def validate_order_request(
    payload: dict[str, Any] | OrderRequest,
    supported_assets: Iterable[str] | None = None,
) -> OrderRequest:
    """Validate a raw submission payload

    Args:
        payload: Mapping in wire format (camelCase or snake_case keys)
        supported_assets: Known asset identifiers (defaults to SUPPORTED_ASSETS)

    Returns:
        Validated OrderRequest

    Raises:
        ValidationError: If the payload is malformed or names an unknown asset
    """
    if isinstance(payload, OrderRequest):
        request = payload
    else:
        if not isinstance(payload, dict):
            raise ValidationError("Order payload must be an object")
        try:
            request = OrderRequest.model_validate(payload)
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Invalid order payload: {details}") from e

    assets = {a.upper() for a in (supported_assets or SUPPORTED_ASSETS)}
    unknown = [t for t in (request.token_in, request.token_out) if t not in assets]
    if unknown:
        raise ValidationError(f"Unknown asset(s): {', '.join(unknown)}")

    return request
