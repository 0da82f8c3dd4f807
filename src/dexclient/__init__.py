"""dexclient: typed client for a DEX aggregation API."""

from .auth import AuthMode, derive_credential
from .client import DexClient
from .errors import (
    ConstructionFailure,
    DecodeFailure,
    DexClientError,
    ServerFailure,
    TransportFailure,
)
from .models import (
    Balance,
    CloseAllPositionsAck,
    FilledOrder,
    OrderResult,
    OrderSide,
    Ticker,
    YesterdayPnl,
)
from .settings import Settings

__all__ = [
    "AuthMode",
    "derive_credential",
    "DexClient",
    "DexClientError",
    "ConstructionFailure",
    "TransportFailure",
    "ServerFailure",
    "DecodeFailure",
    "Balance",
    "CloseAllPositionsAck",
    "FilledOrder",
    "OrderResult",
    "OrderSide",
    "Ticker",
    "YesterdayPnl",
    "Settings",
]
