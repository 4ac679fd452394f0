import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, UniqueConstraint, text
from sqlmodel import Field, SQLModel

from hotshot.core.time import utc_now


class RoomStatus(str):
    DRAFT = "draft"
    LIVE = "live"
    # Present in the schema but never set by any operation
    ENDED = "ended"


class QuestionStatus(str):
    OPEN = "open"
    CLOSED = "closed"


class Room(SQLModel, table=True):
    __tablename__ = "rooms"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    status: str = Field(default=RoomStatus.DRAFT)
    host_session: str
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))


class Question(SQLModel, table=True):
    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("room_id", "order_index", name="uq_questions_room_order"),
        # One open question per room; a racing second "open" fails here
        Index(
            "uq_questions_one_open_per_room",
            "room_id",
            unique=True,
            postgresql_where=text("status = 'open'"),
            sqlite_where=text("status = 'open'"),
        ),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    room_id: str = Field(foreign_key="rooms.id", index=True)
    text: str
    status: str = Field(default=QuestionStatus.CLOSED)
    max_options: int = Field(default=10, ge=1)
    order_index: int = Field(sa_column=Column(Integer, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True)))
