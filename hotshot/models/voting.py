import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from hotshot.core.time import utc_now


def normalize_option_text(value: str) -> str:
    return value.strip().casefold()


class Option(SQLModel, table=True):
    __tablename__ = "options"
    __table_args__ = (UniqueConstraint("question_id", "normalized_text", name="uq_options_question_text"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    question_id: str = Field(foreign_key="questions.id", index=True)
    text: str
    normalized_text: str
    votes_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))


class Player(SQLModel, table=True):
    __tablename__ = "players"
    __table_args__ = (UniqueConstraint("room_id", "session_token", name="uq_players_room_token"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    room_id: str = Field(foreign_key="rooms.id", index=True)
    session_token: str
    name: str
    has_voted: bool = Field(default=False)
    current_question_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))


class Vote(SQLModel, table=True):
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("player_id", "question_id", name="uq_votes_player_question"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    room_id: str = Field(foreign_key="rooms.id")
    question_id: str = Field(foreign_key="questions.id", index=True)
    option_id: str = Field(foreign_key="options.id")
    player_id: str = Field(foreign_key="players.id")
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))
