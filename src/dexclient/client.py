"""Typed client for the DEX aggregation API."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import aiohttp

from .auth import AuthMode, derive_credential
from .models import (
    Balance,
    CloseAllPositionsAck,
    CloseAllPositionsPayload,
    CreateOrderPayload,
    FilledOrder,
    OrderResult,
    OrderSide,
    Ticker,
    YesterdayPnl,
)
from .transport import ProxyConfig, RequestDispatcher

logger = logging.getLogger(__name__)

DEFAULT_MARKET = "apex"


class DexClient:
    """DEX aggregation API client.

    Holds no mutable state after construction, so one instance can serve
    concurrent calls.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        *,
        auth_mode: AuthMode | str = AuthMode.PLAIN,
        default_market: str = DEFAULT_MARKET,
        timeout: float = 10.0,
        proxy: ProxyConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """Initialize DEX client.

        Args:
            api_key: Raw API key
            base_url: API root URL
            auth_mode: Credential derivation mode (plain or sha256)
            default_market: Market id used by legacy single-market endpoints
            timeout: Total per-call timeout in seconds
            proxy: Proxy configuration
            session: Externally managed aiohttp session

        Raises:
            ConstructionFailure: If the key or base URL is unusable
        """
        credential = derive_credential(api_key, auth_mode)
        self.auth_mode = AuthMode(auth_mode)
        self.default_market = default_market
        self._dispatcher = RequestDispatcher(
            base_url,
            credential,
            timeout=timeout,
            proxy=proxy,
            session=session,
        )

    @property
    def base_url(self) -> str:
        return self._dispatcher.base_url

    async def __aenter__(self) -> "DexClient":
        await self._dispatcher.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def get_ticker(self, market_id: str, symbol: str) -> Ticker:
        """Fetch the last price for ``symbol`` on ``market_id``."""
        return await self._dispatcher.request(
            "GET", "/ticker", Ticker, params=[("dex", market_id), ("symbol", symbol)]
        )

    async def get_balance(self, market_id: str) -> Balance:
        """Fetch account equity and balance."""
        return await self._dispatcher.request(
            "GET", "/get-balance", Balance, params=[("dex", market_id)]
        )

    async def get_filled_orders(self, market_id: str, symbol: str) -> list[FilledOrder]:
        """Fetch filled orders for ``symbol``."""
        return await self._dispatcher.request(
            "GET",
            "/get-filled-orders",
            list[FilledOrder],
            params=[("dex", market_id), ("symbol", symbol)],
        )

    async def get_yesterday_pnl(self, market_id: str | None = None) -> YesterdayPnl:
        """Fetch yesterday's PnL (legacy single-market endpoint)."""
        return await self._dispatcher.request(
            "GET",
            "/yesterday-pnl",
            YesterdayPnl,
            params=[("dex", market_id or self.default_market)],
        )

    async def create_order(
        self,
        market_id: str,
        symbol: str,
        size: str | Decimal,
        side: OrderSide | str,
        price: str | Decimal | None = None,
    ) -> OrderResult:
        """Create an order; ``price`` is left out of the body when not given."""
        payload = CreateOrderPayload(symbol=symbol, size=size, side=side, price=price)
        return await self._dispatcher.request(
            "POST", "/create-order", OrderResult, params=[("dex", market_id)], body=payload
        )

    async def close_all_positions(
        self, market_id: str, symbol: str | None = None
    ) -> CloseAllPositionsAck:
        """Close positions for ``symbol``, or every position when omitted."""
        payload = CloseAllPositionsPayload(symbol=symbol)
        return await self._dispatcher.request(
            "POST",
            "/close_all_positions",
            CloseAllPositionsAck,
            params=[("dex", market_id)],
            body=payload,
        )

    async def close(self) -> None:
        """Close connections."""
        await self._dispatcher.close()
