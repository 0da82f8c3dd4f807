"""Error taxonomy for DEX API calls."""

from __future__ import annotations

from typing import Any, Mapping


class DexClientError(Exception):
    """Base exception for all client errors."""


class ConstructionFailure(DexClientError):
    """The client cannot be built (bad credential, base URL or transport)."""


class TransportFailure(DexClientError):
    """Network, TLS, DNS or timeout error; no response was classified."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"Request to {url} failed: {cause!r}")
        self.url = url
        self.cause = cause


class ServerFailure(DexClientError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, url: str, message: str | None = None):
        detail = message if message is not None else "no message"
        super().__init__(f"HTTP {status} from {url}: {detail}")
        self.status = status
        self.url = url
        self.message = message


class DecodeFailure(DexClientError):
    """A 2xx body did not match the expected response shape."""

    def __init__(
        self,
        url: str,
        cause: Exception,
        *,
        headers: Mapping[str, Any] | None = None,
        body: str = "",
    ):
        super().__init__(f"Unexpected response body from {url}: {cause}")
        self.url = url
        self.cause = cause
        self.headers = dict(headers or {})
        self.body = body
