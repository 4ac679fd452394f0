import uuid
from collections.abc import MutableMapping
from typing import Iterator

from fastapi import Request, Response

HOST_SCOPE = "host"
DEFAULT_PREFIX = "hotshot_session_"


class SessionTokenProvider:
    """Stable pseudo-anonymous identity per scope (a room id or ``"host"``).

    The first lookup for a scope mints a uuid4 and stores it under
    ``<prefix><scope>``; later lookups return the stored value.
    """

    def __init__(self, storage: MutableMapping[str, str], prefix: str = DEFAULT_PREFIX):
        self.storage = storage
        self.prefix = prefix

    def key(self, scope: str) -> str:
        return f"{self.prefix}{scope}"

    def get_token(self, scope: str) -> str:
        key = self.key(scope)
        token = self.storage.get(key)
        if not token:
            token = str(uuid.uuid4())
            self.storage[key] = token
        return token

    def peek(self, scope: str) -> str | None:
        """Return the stored token without minting one."""
        return self.storage.get(self.key(scope)) or None


class CookieStorage(MutableMapping):
    """Browser cookies as token storage: reads the request, writes the response."""

    def __init__(self, request: Request, response: Response, max_age: int):
        self._values = dict(request.cookies)
        self._response = response
        self._max_age = max_age

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._values[key] = value
        self._response.set_cookie(
            key,
            value,
            max_age=self._max_age,
            path="/",
            httponly=True,
            samesite="lax",
        )

    def __delitem__(self, key: str) -> None:
        del self._values[key]
        self._response.delete_cookie(key, path="/")

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
