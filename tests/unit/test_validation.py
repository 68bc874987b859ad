"""Tests for order payload validation"""

import pytest

from dexflow.shared.exceptions import ValidationError
from dexflow.validation.orders import OrderRequest, validate_order_request
from tests.factories import OrderFactory


def test_valid_payload_camel_case():
    request = validate_order_request(OrderFactory.payload())
    assert request.side == "buy"
    assert request.token_in == "USDC"
    assert request.token_out == "SOL"
    assert request.amount == 100
    assert request.slippage == 0.5


def test_valid_payload_snake_case_and_normalisation():
    request = validate_order_request(
        {"side": "SELL", "token_in": " sol ", "token_out": "usdc", "amount": "2.5"}
    )
    assert request.side == "sell"
    assert request.token_in == "SOL"
    assert request.token_out == "USDC"
    assert request.amount == 2.5


def test_slippage_defaults():
    payload = OrderFactory.payload()
    del payload["slippage"]
    assert validate_order_request(payload).slippage == 0.5


@pytest.mark.parametrize("amount", [0, -5])
def test_non_positive_amount_rejected(amount):
    with pytest.raises(ValidationError, match="amount"):
        validate_order_request(OrderFactory.payload(amount=amount))


def test_identical_tokens_rejected():
    with pytest.raises(ValidationError, match="must differ"):
        validate_order_request(OrderFactory.payload(tokenIn="SOL", tokenOut="sol"))


def test_unknown_asset_rejected():
    with pytest.raises(ValidationError, match="Unknown asset"):
        validate_order_request(OrderFactory.payload(tokenOut="DOGE"))


def test_custom_asset_list():
    request = validate_order_request(
        OrderFactory.payload(tokenOut="DOGE"), supported_assets={"usdc", "doge"}
    )
    assert request.token_out == "DOGE"


def test_negative_slippage_rejected():
    with pytest.raises(ValidationError, match="slippage"):
        validate_order_request(OrderFactory.payload(slippage=-0.1))


def test_unknown_side_rejected():
    with pytest.raises(ValidationError, match="side"):
        validate_order_request(OrderFactory.payload(side="hold"))


def test_missing_field_rejected():
    payload = OrderFactory.payload()
    del payload["tokenIn"]
    with pytest.raises(ValidationError, match="tokenIn"):
        validate_order_request(payload)


def test_non_mapping_payload_rejected():
    with pytest.raises(ValidationError):
        validate_order_request(["buy", "USDC"])


def test_request_is_immutable():
    request = OrderRequest(side="buy", tokenIn="USDC", tokenOut="SOL", amount=1)
    with pytest.raises(Exception):
        request.amount = 5


def test_prevalidated_request_still_checks_assets():
    request = OrderRequest(side="buy", tokenIn="USDC", tokenOut="DOGE", amount=1)
    with pytest.raises(ValidationError):
        validate_order_request(request)


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": float("inf")},
        {"amount": float("nan")},
        {"slippage": float("inf")},
        {"slippage": float("nan")},
    ],
)
def test_non_finite_numbers_rejected(overrides):
    with pytest.raises(ValidationError):
        validate_order_request(OrderFactory.payload(**overrides))


def test_slippage_above_full_percentage_rejected():
    assert validate_order_request(OrderFactory.payload(slippage=100)).slippage == 100
    with pytest.raises(ValidationError, match="slippage"):
        validate_order_request(OrderFactory.payload(slippage=250))
