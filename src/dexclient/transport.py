"""Authenticated request dispatch and outcome classification."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Sequence, TypeVar
from urllib.parse import urlencode, urlsplit

import aiohttp
from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import ConstructionFailure, DecodeFailure, ServerFailure, TransportFailure
from .models import ErrorEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryParams = Sequence[tuple[str, Any]] | Mapping[str, Any]

JSON_CONTENT_TYPE = "application/json"


def _is_http_url(url: str | None) -> bool:
    parts = urlsplit(url or "")
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


class ProxyConfig:
    """HTTP proxy configuration."""

    def __init__(self, url: str | None = None, username: str | None = None, password: str | None = None):
        self.url = url
        self.username = username
        self.password = password

    @property
    def proxy_url(self) -> str | None:
        if not self.url:
            return None
        if self.username and self.password:
            protocol = self.url.split("://")[0] if "://" in self.url else "http"
            rest = self.url.split("://")[1] if "://" in self.url else self.url
            return f"{protocol}://{self.username}:{self.password}@{rest}"
        return self.url


class RequestDispatcher:
    """Executes one authenticated HTTP call and classifies its result."""

    def __init__(
        self,
        base_url: str,
        credential: str,
        *,
        timeout: float = 10.0,
        proxy: ProxyConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """Initialize dispatcher.

        Args:
            base_url: API root, e.g. ``https://dex.example.com/api``
            credential: Value of the Authorization header
            timeout: Total per-call timeout in seconds
            proxy: Proxy configuration
            session: Externally managed aiohttp session (not closed here)

        Raises:
            ConstructionFailure: If the base URL, proxy URL or timeout is
                invalid
        """
        if not _is_http_url(base_url):
            raise ConstructionFailure(f"Invalid base URL: {base_url!r}")
        if timeout <= 0:
            raise ConstructionFailure(f"Timeout must be positive, got {timeout}")
        proxy = proxy or ProxyConfig()
        if proxy.url and not _is_http_url(proxy.proxy_url):
            raise ConstructionFailure(f"Invalid proxy URL: {proxy.url!r}")

        self.base_url = base_url.rstrip("/")
        self._credential = credential
        self.timeout = timeout
        self.proxy = proxy
        self._client_timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            # aiohttp binds the session to the running loop.
            try:
                self._session = aiohttp.ClientSession(timeout=self._client_timeout)
            except Exception as exc:
                raise ConstructionFailure(f"Failed to create HTTP session: {exc}") from exc
        return self._session

    async def open(self) -> None:
        """Create the HTTP session now instead of on the first request."""
        await self._ensure_session()

    def build_url(self, path: str, params: QueryParams | None = None) -> str:
        """Join base URL, path and query; ``None`` values are left out."""
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.base_url}{path}"

        items = params.items() if isinstance(params, Mapping) else (params or ())
        query = [(key, str(value)) for key, value in items if value is not None]
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    def _headers(self, with_body: bool) -> dict[str, str]:
        headers = {"Authorization": self._credential}
        if with_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    @staticmethod
    def _serialize_body(body: Any) -> str:
        if isinstance(body, BaseModel):
            return body.model_dump_json(exclude_none=True)
        return TypeAdapter(type(body)).dump_json(body).decode()

    async def request(
        self,
        method: str,
        path: str,
        response_type: type[T] | Any,
        *,
        params: QueryParams | None = None,
        body: Any = None,
    ) -> T:
        """Send one request and decode the response into ``response_type``.

        Raises:
            TransportFailure: On connection, TLS, DNS or timeout errors
            ServerFailure: If the status is not 2xx
            DecodeFailure: If a 2xx body does not match ``response_type``
        """
        url = self.build_url(path, params)
        data = self._serialize_body(body) if body is not None else None
        headers = self._headers(data is not None)

        session = await self._ensure_session()
        logger.debug("%s %s", method, url)

        try:
            async with session.request(
                method,
                url,
                data=data,
                headers=headers,
                proxy=self.proxy.proxy_url,
            ) as resp:
                status = resp.status
                resp_headers = dict(resp.headers)
                raw = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportFailure(url, exc) from exc

        logger.debug("%s %s -> %s %r", method, url, status, raw)

        if not 200 <= status < 300:
            message = self._extract_message(raw)
            logger.warning("%s %s failed with HTTP %s: %s", method, url, status, message)
            raise ServerFailure(status, url, message)

        try:
            return TypeAdapter(response_type).validate_json(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValidationError) as exc:
            logger.error("Failed to decode response from %s: %s", url, exc)
            logger.warning("Response headers from %s: %s", url, resp_headers)
            body = raw.decode("utf-8", errors="replace")
            raise DecodeFailure(url, exc, headers=resp_headers, body=body) from exc

    @staticmethod
    def _extract_message(raw: bytes) -> str | None:
        try:
            return ErrorEnvelope.model_validate_json(raw.decode("utf-8")).message
        except (UnicodeDecodeError, ValidationError):
            return None

    async def close(self) -> None:
        """Close the HTTP session if this dispatcher created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None
