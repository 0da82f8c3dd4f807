"""Credential derivation for the Authorization header."""

from __future__ import annotations

import hashlib
from enum import Enum

from .errors import ConstructionFailure


class AuthMode(str, Enum):
    """How the raw API key becomes the header credential."""

    PLAIN = "plain"
    SHA256 = "sha256"


def validate_header_value(value: str) -> None:
    """Reject values that cannot be sent as an HTTP header.

    Raises:
        ConstructionFailure: If the value is empty, contains control
            characters or is not latin-1 encodable
    """
    if not value:
        raise ConstructionFailure("API key must not be empty")
    for ch in value:
        code = ord(ch)
        if (code < 0x20 and ch != "\t") or code == 0x7F:
            raise ConstructionFailure("API key contains control characters")
    try:
        value.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise ConstructionFailure("API key is not a valid header value") from exc


def hash_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode()).hexdigest()


def derive_credential(raw_key: str, mode: AuthMode | str = AuthMode.PLAIN) -> str:
    """Derive the Authorization credential from a raw API key.

    Args:
        raw_key: API key as configured
        mode: ``plain`` sends the key verbatim, ``sha256`` sends its
            lowercase hex SHA-256 digest

    Returns:
        Credential string
    """
    validate_header_value(raw_key)
    try:
        mode = AuthMode(mode)
    except ValueError as exc:
        raise ConstructionFailure(f"Unsupported auth mode: {mode}") from exc

    if mode is AuthMode.SHA256:
        return hash_key(raw_key)
    return raw_key
