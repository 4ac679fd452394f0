from hotshot.models import Option, Player, Question, Room
from hotshot.schemas import OptionRead, PlayerRead, QuestionRead, RoomRead


def serialize_room(room: Room) -> RoomRead:
    return RoomRead(id=room.id, name=room.name, status=room.status)


def serialize_question(question: Question) -> QuestionRead:
    return QuestionRead(
        id=question.id,
        room_id=question.room_id,
        text=question.text,
        status=question.status,
        max_options=question.max_options,
        order_index=question.order_index,
    )


def serialize_option(option: Option) -> OptionRead:
    return OptionRead(id=option.id, text=option.text, votes_count=option.votes_count)


def serialize_player(player: Player) -> PlayerRead:
    return PlayerRead(
        id=player.id,
        name=player.name,
        has_voted=player.has_voted,
        current_question_id=player.current_question_id,
    )
