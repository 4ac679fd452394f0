from hotshot.models.room import Question, QuestionStatus, Room, RoomStatus
from hotshot.models.voting import Option, Player, Vote, normalize_option_text

__all__ = [
    "Question",
    "QuestionStatus",
    "Room",
    "RoomStatus",
    "Option",
    "Player",
    "Vote",
    "normalize_option_text",
]
