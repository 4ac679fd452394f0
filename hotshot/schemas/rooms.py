from typing import List, Optional

from pydantic import BaseModel, Field

from hotshot.schemas.voting import OptionRead, PlayerRead


class RoomCreate(BaseModel):
    name: str = ""


class RoomRead(BaseModel):
    id: str
    name: str
    status: str


class QuestionCreate(BaseModel):
    text: str = ""
    max_options: Optional[int] = None


class QuestionRead(BaseModel):
    id: str
    room_id: str
    text: str
    status: str
    max_options: int
    order_index: int


class RoomState(BaseModel):
    room: RoomRead
    questions: List[QuestionRead] = Field(default_factory=list)
    active_question: Optional[QuestionRead] = None
    options: List[OptionRead] = Field(default_factory=list)
    is_host: bool = False
    player: Optional[PlayerRead] = None
