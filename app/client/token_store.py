"""
Where the caller's access token lives.

The dashboard keeps its token under "prontivus_access_token"; sessions
created before the rename still carry "clinicore_access_token". Both keys are
read, the current one first.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
from starlette.requests import Request

ACCESS_TOKEN_KEY = "prontivus_access_token"
LEGACY_ACCESS_TOKEN_KEY = "clinicore_access_token"
TOKEN_KEYS = (ACCESS_TOKEN_KEY, LEGACY_ACCESS_TOKEN_KEY)


class TokenStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Raw value stored under key, if any."""


class MemoryTokenStore(TokenStore):
    """Dict-backed store for scripts and tests."""

    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set_access_token(self, token: str) -> None:
        self._values[ACCESS_TOKEN_KEY] = token

    def clear(self) -> None:
        for key in TOKEN_KEYS:
            self._values.pop(key, None)


class CookieTokenStore(TokenStore):
    """Reads the token keys from the incoming request's cookies."""

    def __init__(self, request: Request) -> None:
        self._cookies = request.cookies

    def get(self, key: str) -> Optional[str]:
        return self._cookies.get(key)


def resolve_access_token(store: TokenStore) -> Optional[str]:
    for key in TOKEN_KEYS:
        value = store.get(key)
        if value and value.strip():
            return value.strip()
    return None


def token_from_request(request: Request) -> Optional[str]:
    """Bearer header wins; otherwise fall back to the token cookies."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return resolve_access_token(CookieTokenStore(request))


__all__ = [
    "ACCESS_TOKEN_KEY",
    "LEGACY_ACCESS_TOKEN_KEY",
    "TOKEN_KEYS",
    "TokenStore",
    "MemoryTokenStore",
    "CookieTokenStore",
    "resolve_access_token",
    "token_from_request",
]
