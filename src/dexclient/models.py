"""Request payloads and response shapes for the DEX aggregation API."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


def _to_decimal_str(value: Any) -> Any:
    # Legacy revisions send money fields as JSON numbers.
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        value = Decimal(repr(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"not a finite number: {value}")
        # Plain notation, never 1E-8.
        return format(value, "f")
    return value


DecimalStr = Annotated[str, BeforeValidator(_to_decimal_str)]


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class _Response(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Ticker(_Response):
    """Last price for a symbol."""

    symbol: str
    price: DecimalStr


class Balance(_Response):
    """Account equity and balance."""

    equity: DecimalStr
    balance: DecimalStr | None = None


class FilledOrder(_Response):
    """A single filled order record."""

    order_id: str
    filled_size: DecimalStr
    filled_value: DecimalStr
    filled_fee: DecimalStr


class YesterdayPnl(_Response):
    data: DecimalStr


class OrderResult(_Response):
    """Result of order creation.

    Revisions differ in which of these fields are populated, so all are
    optional.
    """

    order_id: str | None = None
    result: str | None = None
    price: DecimalStr | None = None
    size: DecimalStr | None = None
    message: str | None = None


class CloseAllPositionsAck(_Response):
    result: str | None = None
    message: str | None = None


class ErrorEnvelope(_Response):
    """Body of a non-2xx response."""

    message: str | None = None


class CreateOrderPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    symbol: str
    size: DecimalStr
    side: OrderSide
    price: DecimalStr | None = None


class CloseAllPositionsPayload(BaseModel):
    """An absent symbol is left out of the body, closing every position."""

    model_config = ConfigDict(extra="forbid")

    symbol: str | None = None
