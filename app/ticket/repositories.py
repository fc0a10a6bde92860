# app/ticket/repositories.py
"""
Data access for tickets and their comments.

Both repositories take an open SQLAlchemy ``Session``; they commit their own
writes and translate driver failures into the errors in app.core.exceptions.
"""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import is_foreign_key_violation
from app.core.exceptions import NotFoundError, StoreError, ValidationError
from app.ticket.models import Comment, Ticket

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "open"

SLA_HOURS = {"high": 4, "medium": 24}
# Anything that is not exactly "high" or "medium", typos included
SLA_FALLBACK_HOURS = 72

MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def sla_hours(priority: str) -> int:
    return SLA_HOURS.get(priority, SLA_FALLBACK_HOURS)


def compute_sla_deadline(priority: str, created_at: datetime) -> datetime:
    return created_at + timedelta(hours=sla_hours(priority))


def parse_ticket_id(ticket_id: int | str) -> int:
    """Turn a path id into an integer the store can compare.

    Ids that are not integers, or fall outside SQLite's 64-bit INTEGER
    range, cannot match any row, so they are reported as not found.
    """
    try:
        value = int(ticket_id)
    except (TypeError, ValueError):
        raise NotFoundError() from None
    if not MIN_ID <= value <= MAX_ID:
        raise NotFoundError()
    return value


class TicketRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_tickets(self) -> list[Ticket]:
        stmt = select(Ticket).order_by(Ticket.created_at.desc(), Ticket.id.desc())
        try:
            return list(self.db.scalars(stmt))
        except SQLAlchemyError as exc:
            raise _store_error(self.db, exc, "list tickets") from exc

    def create_ticket(self, title: str | None, description: str | None, priority: str | None) -> Ticket:
        if not title or not description or not priority:
            raise ValidationError("All fields are required")

        created_at = utc_now()
        ticket = Ticket(
            title=title,
            description=description,
            priority=priority,
            status=DEFAULT_STATUS,
            created_at=created_at,
            sla_deadline=compute_sla_deadline(priority, created_at),
        )
        try:
            self.db.add(ticket)
            self.db.commit()
            self.db.refresh(ticket)
        except SQLAlchemyError as exc:
            raise _store_error(self.db, exc, "create ticket") from exc

        logger.info("Created ticket %s (priority=%s, sla_deadline=%s)", ticket.id, priority, ticket.sla_deadline)
        return ticket

    def get_ticket(self, ticket_id: int | str) -> Ticket:
        ticket_id = parse_ticket_id(ticket_id)
        try:
            ticket = self.db.get(Ticket, ticket_id)
        except SQLAlchemyError as exc:
            raise _store_error(self.db, exc, "load ticket") from exc
        if ticket is None:
            logger.debug("Ticket %s not found", ticket_id)
            raise NotFoundError()
        return ticket

    def get_ticket_with_comments(self, ticket_id: int | str) -> tuple[Ticket, list[Comment]]:
        ticket = self.get_ticket(ticket_id)
        ticket_id = ticket.id
        stmt = (
            select(Comment)
            .where(Comment.ticket_id == ticket_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        try:
            comments = list(self.db.scalars(stmt))
        except SQLAlchemyError as exc:
            raise _store_error(self.db, exc, "load comments") from exc
        return ticket, comments

    def update_status(self, ticket_id: int | str, status: str | None) -> None:
        if not status:
            raise ValidationError("Status is required")

        ticket_id = parse_ticket_id(ticket_id)
        stmt = update(Ticket).where(Ticket.id == ticket_id).values(status=status)
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise _store_error(self.db, exc, "update ticket") from exc

        if result.rowcount == 0:
            logger.debug("Status update for missing ticket %s", ticket_id)
            raise NotFoundError()
        logger.info("Ticket %s status set to %r", ticket_id, status)

    def delete_ticket(self, ticket_id: int | str) -> None:
        ticket_id = parse_ticket_id(ticket_id)
        # comments go with it through ON DELETE CASCADE
        stmt = delete(Ticket).where(Ticket.id == ticket_id)
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise _store_error(self.db, exc, "delete ticket") from exc

        if result.rowcount == 0:
            logger.debug("Delete for missing ticket %s", ticket_id)
            raise NotFoundError()
        logger.info("Deleted ticket %s", ticket_id)


class CommentRepository:
    def __init__(self, db: Session):
        self.db = db

    def add_comment(self, ticket_id: int | str, text: str | None) -> int:
        """Insert a comment and return its id.

        Existence of the ticket is left to the foreign key; a violation
        means the ticket is gone and is reported as ``NotFoundError``.
        """
        if not text:
            raise ValidationError("Comment text is required")

        ticket_id = parse_ticket_id(ticket_id)
        comment = Comment(ticket_id=ticket_id, comment=text, created_at=utc_now())
        try:
            self.db.add(comment)
            self.db.commit()
        except IntegrityError as exc:
            if is_foreign_key_violation(exc):
                self.db.rollback()
                logger.debug("Comment rejected, ticket %s does not exist", ticket_id)
                raise NotFoundError() from exc
            raise _store_error(self.db, exc, "add comment") from exc
        except SQLAlchemyError as exc:
            raise _store_error(self.db, exc, "add comment") from exc

        logger.info("Added comment %s to ticket %s", comment.id, ticket_id)
        return comment.id


def _store_error(db: Session, exc: SQLAlchemyError, action: str) -> StoreError:
    db.rollback()
    logger.error("Failed to %s: %s", action, exc)
    return StoreError(str(getattr(exc, "orig", None) or exc))
