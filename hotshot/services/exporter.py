import csv
import io
import re
from typing import Iterable

from hotshot.core.errors import NotFoundError, StateError
from hotshot.models import Option, Player, Question, QuestionStatus, Room, Vote
from hotshot.schemas import ResultRow, ResultsExport
from hotshot.services.store import RoomStore

HEADER = ("Question", "Player", "Option")


def render_csv(rows: Iterable[ResultRow]) -> str:
    """Header line as-is, then every data field quoted."""
    out = io.StringIO()
    csv.writer(out, lineterminator="\n").writerow(HEADER)
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([row.question, row.player, row.option])
    return out.getvalue()


def _slug(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "room"


class ResultsExporter:
    def __init__(self, store: RoomStore):
        self.store = store

    async def collect_rows(self, question: Question) -> list[ResultRow]:
        votes = await self.store.select(
            Vote,
            order_by=(Vote.created_at, Vote.id),
            question_id=question.id,
        )
        if not votes:
            return []
        players = await self.store.select(Player, id={vote.player_id for vote in votes})
        options = await self.store.select(Option, id={vote.option_id for vote in votes})
        names = {player.id: player.name for player in players}
        texts = {option.id: option.text for option in options}
        return [
            ResultRow(
                question=question.text,
                player=names.get(vote.player_id, ""),
                option=texts.get(vote.option_id, ""),
            )
            for vote in votes
        ]

    async def export_question(self, room_id: str, question_id: str) -> ResultsExport:
        room = await self._require_room(room_id)
        question = await self.store.get(Question, question_id)
        if not question or question.room_id != room_id:
            raise NotFoundError("Question not found")
        if question.status != QuestionStatus.CLOSED:
            raise StateError("Close the question before exporting its results")
        rows = await self.collect_rows(question)
        return ResultsExport(
            filename=f"{_slug(room.name)}-question-{question.order_index}.csv",
            content=render_csv(rows),
        )

    async def export_room(self, room_id: str) -> ResultsExport:
        room = await self._require_room(room_id)
        questions = await self.store.select(
            Question,
            order_by=(Question.order_index,),
            room_id=room_id,
            status=QuestionStatus.CLOSED,
        )
        rows: list[ResultRow] = []
        for question in questions:
            rows.extend(await self.collect_rows(question))
        return ResultsExport(filename=f"{_slug(room.name)}-results.csv", content=render_csv(rows))

    async def _require_room(self, room_id: str) -> Room:
        room = await self.store.get(Room, room_id)
        if not room:
            raise NotFoundError("Room not found")
        return room
