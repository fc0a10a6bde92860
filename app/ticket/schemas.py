# app/ticket/schemas.py
from datetime import datetime, timezone

from pydantic import BaseModel, field_validator

# Request fields, and the body itself, may be missing; presence is
# checked by the repositories, which answer with 400 {"error": ...}.


class TicketCreate(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: str | None = None


class StatusUpdate(BaseModel):
    status: str | None = None


class CommentCreate(BaseModel):
    comment: str | None = None


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TicketOut(BaseModel):
    id: int
    title: str
    description: str
    priority: str
    status: str
    created_at: datetime
    sla_deadline: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("created_at", "sla_deadline")
    @classmethod
    def assume_utc(cls, value):
        return _as_utc(value)


class CommentOut(BaseModel):
    id: int
    ticket_id: int
    comment: str
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value):
        return _as_utc(value)


class TicketDetail(BaseModel):
    ticket: TicketOut
    comments: list[CommentOut]


class CommentCreated(BaseModel):
    id: int
    message: str


class Message(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str
