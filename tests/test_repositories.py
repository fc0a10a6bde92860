# tests/test_repositories.py
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.core.exceptions import NotFoundError, ValidationError
from app.ticket.models import Comment, Ticket
from app.ticket.repositories import (
    CommentRepository,
    TicketRepository,
    compute_sla_deadline,
    parse_ticket_id,
    sla_hours,
)


@pytest.fixture
def tickets(session):
    return TicketRepository(session)


@pytest.fixture
def comments(session):
    return CommentRepository(session)


def count_comments(session, ticket_id):
    return session.scalar(select(func.count()).select_from(Comment).where(Comment.ticket_id == ticket_id))


@pytest.mark.parametrize(
    "priority,hours",
    [("high", 4), ("medium", 24), ("low", 72), ("urgent", 72), ("", 72), ("High", 72)],
)
def test_sla_hours(priority, hours):
    assert sla_hours(priority) == hours


def test_compute_sla_deadline_is_after_creation():
    created = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert compute_sla_deadline("medium", created) == datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)
    assert compute_sla_deadline("whatever", created) > created


def test_create_ticket_defaults(tickets):
    ticket = tickets.create_ticket("Printer", "Out of toner", "medium")

    assert ticket.id == 1
    assert ticket.status == "open"
    assert ticket.sla_deadline - ticket.created_at == timedelta(hours=24)


@pytest.mark.parametrize(
    "title,description,priority",
    [(None, "D", "high"), ("T", None, "high"), ("T", "D", None), ("", "D", "high")],
)
def test_create_ticket_requires_fields(tickets, session, title, description, priority):
    with pytest.raises(ValidationError):
        tickets.create_ticket(title, description, priority)
    assert session.scalar(select(func.count()).select_from(Ticket)) == 0


def test_list_tickets_newest_first(tickets):
    a = tickets.create_ticket("A", "a", "low")
    b = tickets.create_ticket("B", "b", "low")
    c = tickets.create_ticket("C", "c", "low")

    assert [t.id for t in tickets.list_tickets()] == [c.id, b.id, a.id]


def test_get_ticket_with_comments_in_insertion_order(tickets, comments):
    ticket = tickets.create_ticket("T", "D", "high")
    first = comments.add_comment(ticket.id, "first")
    second = comments.add_comment(ticket.id, "second")

    loaded, rows = tickets.get_ticket_with_comments(ticket.id)
    assert loaded.id == ticket.id
    assert [c.id for c in rows] == [first, second]
    assert [c.comment for c in rows] == ["first", "second"]


def test_get_missing_ticket(tickets):
    with pytest.raises(NotFoundError):
        tickets.get_ticket_with_comments(7)


def test_update_status_accepts_any_string(tickets):
    ticket = tickets.create_ticket("T", "D", "high")
    tickets.update_status(ticket.id, "escalated to vendor")

    loaded, _ = tickets.get_ticket_with_comments(ticket.id)
    assert loaded.status == "escalated to vendor"


def test_update_status_validation_and_missing(tickets):
    ticket = tickets.create_ticket("T", "D", "high")

    with pytest.raises(ValidationError):
        tickets.update_status(ticket.id, "")
    with pytest.raises(NotFoundError):
        tickets.update_status(ticket.id + 1, "closed")

    assert [(t.id, t.status) for t in tickets.list_tickets()] == [(ticket.id, "open")]


def test_delete_cascades_to_comments(tickets, comments, session):
    ticket = tickets.create_ticket("T", "D", "high")
    for n in range(3):
        comments.add_comment(ticket.id, f"comment {n}")
    assert count_comments(session, ticket.id) == 3

    tickets.delete_ticket(ticket.id)

    assert count_comments(session, ticket.id) == 0
    with pytest.raises(NotFoundError):
        tickets.delete_ticket(ticket.id)


def test_ids_are_not_reused(tickets, comments):
    ticket = tickets.create_ticket("T", "D", "high")
    comment_id = comments.add_comment(ticket.id, "x")
    tickets.delete_ticket(ticket.id)

    again = tickets.create_ticket("T", "D", "high")
    assert again.id > ticket.id
    assert comments.add_comment(again.id, "y") > comment_id


def test_comment_on_missing_ticket_creates_nothing(comments, tickets, session):
    with pytest.raises(NotFoundError):
        comments.add_comment(99, "orphan")
    assert session.scalar(select(func.count()).select_from(Comment)) == 0

    # session is still usable after the rejected insert
    ticket = tickets.create_ticket("T", "D", "high")
    comments.add_comment(ticket.id, "ok")
    assert count_comments(session, ticket.id) == 1


def test_comment_requires_text(comments, tickets):
    ticket = tickets.create_ticket("T", "D", "high")
    with pytest.raises(ValidationError):
        comments.add_comment(ticket.id, "")


@pytest.mark.parametrize("raw", ["abc", "1.5", "", None, 2**63, "-9223372036854775809"])
def test_parse_ticket_id_rejects_unmatchable_ids(raw):
    with pytest.raises(NotFoundError):
        parse_ticket_id(raw)


def test_parse_ticket_id_accepts_integer_range():
    assert parse_ticket_id("42") == 42
    assert parse_ticket_id(2**63 - 1) == 2**63 - 1


def test_out_of_range_id_is_not_found_everywhere(tickets, comments, session):
    ticket = tickets.create_ticket("T", "D", "high")
    huge = "99999999999999999999"

    with pytest.raises(NotFoundError):
        tickets.get_ticket_with_comments(huge)
    with pytest.raises(NotFoundError):
        tickets.update_status(huge, "closed")
    with pytest.raises(NotFoundError):
        tickets.delete_ticket(huge)
    with pytest.raises(NotFoundError):
        comments.add_comment(huge, "hi")

    assert [t.id for t in tickets.list_tickets()] == [ticket.id]
    assert count_comments(session, ticket.id) == 0
