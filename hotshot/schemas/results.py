from typing import List

from pydantic import BaseModel, Field

from hotshot.schemas.rooms import QuestionRead
from hotshot.schemas.voting import OptionRead


class ResultRow(BaseModel):
    question: str
    player: str
    option: str


class QuestionResults(BaseModel):
    question: QuestionRead
    options: List[OptionRead] = Field(default_factory=list)
    rows: List[ResultRow] = Field(default_factory=list)
    total_votes: int = 0


class ResultsExport(BaseModel):
    filename: str
    content: str
