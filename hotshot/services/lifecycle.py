import logging
from typing import Optional

from hotshot.core.config import Settings
from hotshot.core.errors import DuplicateError, NotFoundError, StateError, ValidationError
from hotshot.models import Option, Player, Question, QuestionStatus, Room, RoomStatus
from hotshot.schemas import QuestionResults
from hotshot.services.exporter import ResultsExporter
from hotshot.services.serializers import serialize_option, serialize_question
from hotshot.services.store import RoomStore
from hotshot.services.tally import fetch_options


class RoomLifecycle:
    """Host-driven room and question transitions.

    Rooms move draft -> live. Questions move closed -> open -> closed, and a room
    never has more than one open question: opening closes the current one in the
    same transaction, and a partial unique index rejects a racing second open.
    """

    def __init__(self, store: RoomStore, settings: Settings, exporter: Optional[ResultsExporter] = None):
        self.logger = logging.getLogger("lifecycle")
        self.store = store
        self.settings = settings
        self.exporter = exporter or ResultsExporter(store)

    async def create_room(self, name: str, host_session: str) -> Room:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Enter room name")
        room = await self.store.insert(Room(name=name, host_session=host_session, status=RoomStatus.DRAFT))
        self.logger.info("Room created room=%s name=%r", room.id, room.name)
        return room

    async def get_room(self, room_id: str) -> Room:
        room = await self.store.get(Room, room_id)
        if not room:
            raise NotFoundError("Room not found")
        return room

    @staticmethod
    def is_host(room: Room, host_token: Optional[str]) -> bool:
        # UX gate only: anyone holding the token value passes
        return bool(host_token) and room.host_session == host_token

    async def publish_room(self, room_id: str) -> Room:
        room = await self.get_room(room_id)
        if room.status != RoomStatus.DRAFT:
            raise StateError(f"Room is already {room.status}")
        if not await self.store.count(Question, room_id=room_id):
            raise ValidationError("Add at least one question before publishing")
        published = await self.store.update(Room, {"status": RoomStatus.LIVE}, id=room_id, status=RoomStatus.DRAFT)
        if not published:
            raise StateError("Room is already live")
        self.logger.info("Room published room=%s", room_id)
        return published[0]

    async def add_question(self, room_id: str, text: str, max_options: Optional[int] = None) -> Question:
        room = await self.get_room(room_id)
        if room.status == RoomStatus.ENDED:
            raise StateError("Room has ended")
        text = (text or "").strip()
        if not text:
            raise ValidationError("Enter a question")
        if max_options is None:
            max_options = self.settings.default_max_options
        if not 1 <= max_options <= self.settings.max_options_limit:
            raise ValidationError(f"max_options must be between 1 and {self.settings.max_options_limit}")

        last = await self.store.max(Question, "order_index", room_id=room_id)
        question = await self.store.insert(
            Question(
                room_id=room_id,
                text=text,
                max_options=max_options,
                status=QuestionStatus.CLOSED,
                order_index=(last or 0) + 1,
            )
        )
        self.logger.info(
            "Question added room=%s question=%s order=%s max_options=%s",
            room_id,
            question.id,
            question.order_index,
            max_options,
        )
        return question

    async def list_questions(self, room_id: str) -> list[Question]:
        return await self.store.select(Question, order_by=(Question.order_index,), room_id=room_id)

    async def active_question(self, room_id: str) -> Optional[Question]:
        return await self.store.first(Question, room_id=room_id, status=QuestionStatus.OPEN)

    async def get_question(self, room_id: str, question_id: str) -> Question:
        question = await self.store.get(Question, question_id)
        if not question or question.room_id != room_id:
            raise NotFoundError("Question not found")
        return question

    async def open_question(self, room_id: str, question_id: str) -> Question:
        room = await self.get_room(room_id)
        if room.status != RoomStatus.LIVE:
            raise StateError("Publish the room before opening questions")
        question = await self.get_question(room_id, question_id)
        if question.status == QuestionStatus.OPEN:
            return question
        # Without vote rows nothing would stop a second vote after the reset below
        if not self.settings.track_attribution and await self.store.count(Option, question_id=question.id):
            raise StateError("Questions with votes cannot be reopened in tally-only mode")

        try:
            async with self.store.atomic() as tx:
                # Close first so the room never holds two open questions
                closed = await tx.update(
                    Question, {"status": QuestionStatus.CLOSED}, room_id=room_id, status=QuestionStatus.OPEN
                )
                [question] = await tx.update(Question, {"status": QuestionStatus.OPEN}, id=question_id)
                await tx.update(Player, {"has_voted": False, "current_question_id": None}, room_id=room_id)
        except DuplicateError as exc:
            raise StateError("Another question was opened at the same time") from exc

        self.logger.info(
            "Question opened room=%s question=%s closed=%s",
            room_id,
            question_id,
            [q.id for q in closed],
        )
        return question

    async def close_question(self, room_id: str, question_id: str) -> QuestionResults:
        question = await self.get_question(room_id, question_id)
        if question.status == QuestionStatus.OPEN:
            [question] = await self.store.update(Question, {"status": QuestionStatus.CLOSED}, id=question_id)
            self.logger.info("Question closed room=%s question=%s", room_id, question_id)
        results = await self.results(question)
        self.logger.info(
            "Results room=%s question=%s total_votes=%s tallies=%s",
            room_id,
            question_id,
            results.total_votes,
            {option.text: option.votes_count for option in results.options},
        )
        return results

    async def results(self, question: Question) -> QuestionResults:
        options = await fetch_options(self.store, question.id)
        rows = await self.exporter.collect_rows(question)
        return QuestionResults(
            question=serialize_question(question),
            options=[serialize_option(option) for option in options],
            rows=rows,
            total_votes=sum(option.votes_count for option in options),
        )
