from typing import Optional

from pydantic import BaseModel


class JoinRequest(BaseModel):
    name: str = ""


class PlayerRead(BaseModel):
    id: str
    name: str
    has_voted: bool
    current_question_id: Optional[str] = None


class VoteRequest(BaseModel):
    option_id: str


class ProposeRequest(BaseModel):
    text: str = ""


class OptionRead(BaseModel):
    id: str
    text: str
    votes_count: int
