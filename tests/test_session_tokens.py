from starlette.requests import Request
from starlette.responses import Response

from hotshot.services.session_tokens import HOST_SCOPE, CookieStorage, SessionTokenProvider


def make_request(cookie_header: str = "") -> Request:
    headers = [(b"cookie", cookie_header.encode())] if cookie_header else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def test_token_is_stable_per_scope():
    provider = SessionTokenProvider({})
    first = provider.get_token("room-1")
    assert first
    assert provider.get_token("room-1") == first


def test_tokens_differ_across_scopes():
    provider = SessionTokenProvider({})
    assert provider.get_token("room-1") != provider.get_token(HOST_SCOPE)
    assert provider.get_token("room-1") != provider.get_token("room-2")


def test_token_survives_a_new_provider_over_same_storage():
    storage = {}
    token = SessionTokenProvider(storage).get_token(HOST_SCOPE)
    assert storage == {"hotshot_session_host": token}
    assert SessionTokenProvider(storage).get_token(HOST_SCOPE) == token


def test_peek_does_not_mint():
    storage = {}
    provider = SessionTokenProvider(storage)
    assert provider.peek("room-1") is None
    assert storage == {}


def test_cookie_storage_reads_request_cookies():
    response = Response()
    storage = CookieStorage(make_request("hotshot_session_host=abc"), response, max_age=60)
    assert SessionTokenProvider(storage).get_token(HOST_SCOPE) == "abc"
    assert "set-cookie" not in response.headers


def test_cookie_storage_sets_cookie_on_first_use():
    response = Response()
    storage = CookieStorage(make_request(), response, max_age=60)
    token = SessionTokenProvider(storage).get_token("room-9")
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"hotshot_session_room-9={token}")
    assert "HttpOnly" in cookie
    assert "Max-Age=60" in cookie
