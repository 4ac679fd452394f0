import logging
from typing import Optional

from hotshot.core.config import Settings
from hotshot.core.errors import (
    AlreadyVotedError,
    DuplicateError,
    NotFoundError,
    OptionLimitError,
    StateError,
    ValidationError,
)
from hotshot.models import Option, Player, Question, QuestionStatus, Room, RoomStatus, Vote, normalize_option_text
from hotshot.services.store import RoomStore
from hotshot.services.tally import fetch_options


class VotingEngine:
    """Joins, single votes per question, and propose-an-option-and-vote."""

    def __init__(self, store: RoomStore, settings: Settings):
        self.logger = logging.getLogger("voting")
        self.store = store
        self.settings = settings

    async def join(self, room_id: str, session_token: str, name: str) -> Player:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Enter your name")
        room = await self.store.get(Room, room_id)
        if not room:
            raise NotFoundError("Room not found")
        if room.status != RoomStatus.LIVE:
            raise StateError("Room is not live")
        try:
            player = await self.store.insert(Player(room_id=room_id, session_token=session_token, name=name))
        except DuplicateError:
            # One join per browser per room
            player = await self.find_player(room_id, session_token)
            if player is None:
                raise
            self.logger.info("Player already joined room=%s player=%s", room_id, player.id)
            return player
        self.logger.info("Player joined room=%s player=%s name=%r", room_id, player.id, player.name)
        return player

    async def find_player(self, room_id: str, session_token: Optional[str]) -> Optional[Player]:
        if not session_token:
            return None
        return await self.store.first(Player, room_id=room_id, session_token=session_token)

    async def list_options(self, question_id: str) -> list[Option]:
        return await fetch_options(self.store, question_id)

    async def vote(self, room_id: str, session_token: str, question_id: str, option_id: str) -> Option:
        player = await self._require_player(room_id, session_token)
        question = await self._require_active(room_id, question_id)
        self._ensure_can_vote(player, question)
        option = await self.store.get(Option, option_id)
        if not option or option.question_id != question.id:
            raise NotFoundError("Option not found")
        async with self.store.atomic() as tx:
            option = await self._cast(tx, player, question, option)
        self._log_vote(player, question, option)
        return option

    async def propose_and_vote(self, room_id: str, session_token: str, question_id: str, text: str) -> Option:
        """Add an option (or reuse a matching one) and vote for it in one transaction.

        Nothing is written unless the vote is cast, so a rejected vote never
        leaves an empty option behind.
        """
        player = await self._require_player(room_id, session_token)
        question = await self._require_active(room_id, question_id)
        self._ensure_can_vote(player, question)
        text = (text or "").strip()
        if not text:
            raise ValidationError("Enter an option")

        try:
            option, created = await self._propose(player, question, text)
        except DuplicateError:
            # Lost an insert race on the same text; the vote goes to the winner
            option, created = await self._propose(player, question, text)
        if created:
            self.logger.info("Option proposed question=%s option=%s text=%r", question.id, option.id, text)
        self._log_vote(player, question, option)
        return option

    async def _propose(self, player: Player, question: Question, text: str) -> tuple[Option, bool]:
        normalized = normalize_option_text(text)
        async with self.store.atomic() as tx:
            if await tx.count(Option, question_id=question.id) >= question.max_options:
                raise OptionLimitError(f"This question allows at most {question.max_options} options")
            option = await tx.first(Option, question_id=question.id, normalized_text=normalized)
            created = option is None
            if created:
                option = await tx.insert(
                    Option(question_id=question.id, text=text, normalized_text=normalized, votes_count=0)
                )
            option = await self._cast(tx, player, question, option)
        return option, created

    async def _cast(self, tx: RoomStore, player: Player, question: Question, option: Option) -> Option:
        if self.settings.track_attribution:
            try:
                await tx.insert(
                    Vote(room_id=player.room_id, question_id=question.id, option_id=option.id, player_id=player.id)
                )
            except DuplicateError as exc:
                raise AlreadyVotedError("You already voted on this question") from exc
        [option] = await tx.increment(Option, "votes_count", 1, id=option.id)
        await tx.update(Player, {"has_voted": True, "current_question_id": question.id}, id=player.id)
        return option

    def _log_vote(self, player: Player, question: Question, option: Option) -> None:
        self.logger.info(
            "Vote recorded room=%s question=%s player=%s option=%s votes=%s",
            player.room_id,
            question.id,
            player.id,
            option.id,
            option.votes_count,
        )

    async def _require_player(self, room_id: str, session_token: Optional[str]) -> Player:
        player = await self.find_player(room_id, session_token)
        if player is None:
            raise NotFoundError("Join the room before voting")
        return player

    async def _require_active(self, room_id: str, question_id: str) -> Question:
        active = await self.store.first(Question, room_id=room_id, status=QuestionStatus.OPEN)
        if active is None:
            raise StateError("No active question")
        if active.id != question_id:
            raise StateError("Question is not open")
        return active

    @staticmethod
    def _ensure_can_vote(player: Player, question: Question) -> None:
        if player.has_voted and player.current_question_id == question.id:
            raise AlreadyVotedError("You already voted on this question")
