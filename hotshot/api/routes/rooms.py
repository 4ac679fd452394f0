from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from hotshot.dependencies import (
    get_exporter,
    get_lifecycle,
    get_token_provider,
    get_voting,
    require_host,
)
from hotshot.models import QuestionStatus, Room
from hotshot.schemas import (
    JoinRequest,
    OptionRead,
    PlayerRead,
    ProposeRequest,
    QuestionCreate,
    QuestionRead,
    QuestionResults,
    ResultsExport,
    RoomCreate,
    RoomRead,
    RoomState,
    VoteRequest,
)
from hotshot.services.exporter import ResultsExporter
from hotshot.services.lifecycle import RoomLifecycle
from hotshot.services.serializers import (
    serialize_option,
    serialize_player,
    serialize_question,
    serialize_room,
)
from hotshot.services.session_tokens import HOST_SCOPE, SessionTokenProvider
from hotshot.services.voting import VotingEngine

router = APIRouter(prefix="/rooms", tags=["rooms"])


def csv_response(export: ResultsExport) -> Response:
    return Response(
        content=export.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.post("", response_model=RoomRead)
async def create_room(
    payload: RoomCreate,
    tokens: SessionTokenProvider = Depends(get_token_provider),
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
):
    room = await lifecycle.create_room(payload.name, tokens.get_token(HOST_SCOPE))
    return serialize_room(room)


@router.get("/{room_id}", response_model=RoomState)
async def room_state(
    room_id: str,
    tokens: SessionTokenProvider = Depends(get_token_provider),
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
    voting: VotingEngine = Depends(get_voting),
):
    room = await lifecycle.get_room(room_id)
    questions = await lifecycle.list_questions(room_id)
    active = next((q for q in questions if q.status == QuestionStatus.OPEN), None)
    options = await voting.list_options(active.id) if active else []
    player = await voting.find_player(room_id, tokens.peek(room_id))
    return RoomState(
        room=serialize_room(room),
        questions=[serialize_question(q) for q in questions],
        active_question=serialize_question(active) if active else None,
        options=[serialize_option(o) for o in options],
        is_host=lifecycle.is_host(room, tokens.peek(HOST_SCOPE)),
        player=serialize_player(player) if player else None,
    )


@router.post("/{room_id}/publish", response_model=RoomRead)
async def publish_room(
    room_id: str,
    _host: Room = Depends(require_host),
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
):
    return serialize_room(await lifecycle.publish_room(room_id))


@router.post("/{room_id}/questions", response_model=QuestionRead)
async def add_question(
    room_id: str,
    payload: QuestionCreate,
    _host: Room = Depends(require_host),
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
):
    question = await lifecycle.add_question(room_id, payload.text, payload.max_options)
    return serialize_question(question)


@router.post("/{room_id}/questions/{question_id}/open", response_model=QuestionRead)
async def open_question(
    room_id: str,
    question_id: str,
    _host: Room = Depends(require_host),
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
):
    return serialize_question(await lifecycle.open_question(room_id, question_id))


@router.post("/{room_id}/questions/{question_id}/close", response_model=QuestionResults)
async def close_question(
    room_id: str,
    question_id: str,
    _host: Room = Depends(require_host),
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.close_question(room_id, question_id)


@router.get("/{room_id}/questions/{question_id}/export.csv")
async def export_question(
    room_id: str,
    question_id: str,
    _host: Room = Depends(require_host),
    exporter: ResultsExporter = Depends(get_exporter),
):
    return csv_response(await exporter.export_question(room_id, question_id))


@router.get("/{room_id}/export.csv")
async def export_room(
    room_id: str,
    _host: Room = Depends(require_host),
    exporter: ResultsExporter = Depends(get_exporter),
):
    return csv_response(await exporter.export_room(room_id))


@router.post("/{room_id}/join", response_model=PlayerRead)
async def join_room(
    room_id: str,
    payload: JoinRequest,
    tokens: SessionTokenProvider = Depends(get_token_provider),
    voting: VotingEngine = Depends(get_voting),
):
    player = await voting.join(room_id, tokens.get_token(room_id), payload.name)
    return serialize_player(player)


@router.get("/{room_id}/questions/{question_id}/options", response_model=List[OptionRead])
async def list_options(
    room_id: str,
    question_id: str,
    lifecycle: RoomLifecycle = Depends(get_lifecycle),
    voting: VotingEngine = Depends(get_voting),
):
    await lifecycle.get_question(room_id, question_id)
    return [serialize_option(o) for o in await voting.list_options(question_id)]


@router.post("/{room_id}/questions/{question_id}/vote", response_model=OptionRead)
async def vote(
    room_id: str,
    question_id: str,
    payload: VoteRequest,
    tokens: SessionTokenProvider = Depends(get_token_provider),
    voting: VotingEngine = Depends(get_voting),
):
    option = await voting.vote(room_id, tokens.peek(room_id), question_id, payload.option_id)
    return serialize_option(option)


@router.post("/{room_id}/questions/{question_id}/options", response_model=OptionRead)
async def propose_option(
    room_id: str,
    question_id: str,
    payload: ProposeRequest,
    tokens: SessionTokenProvider = Depends(get_token_provider),
    voting: VotingEngine = Depends(get_voting),
):
    option = await voting.propose_and_vote(room_id, tokens.peek(room_id), question_id, payload.text)
    return serialize_option(option)
