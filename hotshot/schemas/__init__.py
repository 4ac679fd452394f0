from hotshot.schemas.results import QuestionResults, ResultRow, ResultsExport
from hotshot.schemas.rooms import QuestionCreate, QuestionRead, RoomCreate, RoomRead, RoomState
from hotshot.schemas.voting import JoinRequest, OptionRead, PlayerRead, ProposeRequest, VoteRequest

__all__ = [
    "QuestionResults",
    "ResultRow",
    "ResultsExport",
    "QuestionCreate",
    "QuestionRead",
    "RoomCreate",
    "RoomRead",
    "RoomState",
    "JoinRequest",
    "OptionRead",
    "PlayerRead",
    "ProposeRequest",
    "VoteRequest",
]
