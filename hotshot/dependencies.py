from fastapi import Depends, Request, Response

from hotshot.core.config import Settings
from hotshot.core.errors import PermissionDeniedError
from hotshot.models import Room
from hotshot.services.exporter import ResultsExporter
from hotshot.services.lifecycle import RoomLifecycle
from hotshot.services.session_tokens import HOST_SCOPE, CookieStorage, SessionTokenProvider
from hotshot.services.store import RoomStore
from hotshot.services.voting import VotingEngine


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RoomStore:
    return request.app.state.store


def get_lifecycle(request: Request) -> RoomLifecycle:
    return request.app.state.lifecycle


def get_voting(request: Request) -> VotingEngine:
    return request.app.state.voting


def get_exporter(request: Request) -> ResultsExporter:
    return request.app.state.exporter


def get_token_provider(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> SessionTokenProvider:
    storage = CookieStorage(request, response, max_age=settings.session_cookie_max_age)
    return SessionTokenProvider(storage, prefix=settings.session_cookie_prefix)


async def require_host(
    room_id: str,
    tokens: SessionTokenProvider = Depends(get_token_provider),
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
) -> Room:
    """Host-only gate for the room screen; a convenience check, not authorization."""
    room = await lifecycle.get_room(room_id)
    if not lifecycle.is_host(room, tokens.peek(HOST_SCOPE)):
        raise PermissionDeniedError("Only the host can do that")
    return room
