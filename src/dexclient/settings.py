from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, SecretStr, field_validator

from .auth import AuthMode


class ProxySettings(BaseModel):
    enabled: bool = False
    url: str | None = None
    username: str | None = None
    password: SecretStr | None = None

    model_config = {"extra": "forbid"}


class Settings(BaseModel):
    api_key: SecretStr
    base_url: str
    auth_mode: AuthMode = AuthMode.PLAIN
    default_market: str = Field(default="apex", min_length=1)
    timeout: float = Field(default=10.0, gt=0)
    proxy: ProxySettings = Field(default_factory=ProxySettings)

    model_config = {"extra": "forbid"}

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ValueError("base_url must be an absolute http(s) URL")
        return value.rstrip("/")

    def redacted(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        data["api_key"] = "***"
        proxy = data.get("proxy")
        if isinstance(proxy, dict) and proxy.get("password") is not None:
            proxy["password"] = "***"
        return data
