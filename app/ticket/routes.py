# app/ticket/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.ticket.repositories import CommentRepository, TicketRepository
from app.ticket.schemas import (
    CommentCreate,
    CommentCreated,
    CommentOut,
    ErrorOut,
    Message,
    StatusUpdate,
    TicketCreate,
    TicketDetail,
    TicketOut,
)

router = APIRouter(
    prefix="/api/tickets",
    tags=["Tickets"],
    responses={500: {"model": ErrorOut}},
)

NOT_FOUND = {404: {"model": ErrorOut}}
BAD_REQUEST = {400: {"model": ErrorOut}}


def get_ticket_repository(db: Session = Depends(get_db)) -> TicketRepository:
    return TicketRepository(db)


def get_comment_repository(db: Session = Depends(get_db)) -> CommentRepository:
    return CommentRepository(db)


@router.get("", response_model=list[TicketOut])
def list_all(repo: TicketRepository = Depends(get_ticket_repository)):
    return repo.list_tickets()


@router.post("", response_model=TicketOut, status_code=201, responses=BAD_REQUEST)
def create(payload: TicketCreate | None = None, repo: TicketRepository = Depends(get_ticket_repository)):
    payload = payload or TicketCreate()
    return repo.create_ticket(payload.title, payload.description, payload.priority)


@router.get("/{ticket_id}", response_model=TicketDetail, responses=NOT_FOUND)
def get(ticket_id: str, repo: TicketRepository = Depends(get_ticket_repository)):
    ticket, comments = repo.get_ticket_with_comments(ticket_id)
    return TicketDetail(
        ticket=TicketOut.model_validate(ticket),
        comments=[CommentOut.model_validate(c) for c in comments],
    )


@router.put("/{ticket_id}", response_model=Message, responses={**BAD_REQUEST, **NOT_FOUND})
def update_status(
    ticket_id: str,
    payload: StatusUpdate | None = None,
    repo: TicketRepository = Depends(get_ticket_repository),
):
    payload = payload or StatusUpdate()
    repo.update_status(ticket_id, payload.status)
    return {"message": "Ticket updated successfully"}


@router.delete("/{ticket_id}", response_model=Message, responses=NOT_FOUND)
def delete(ticket_id: str, repo: TicketRepository = Depends(get_ticket_repository)):
    repo.delete_ticket(ticket_id)
    return {"message": "Ticket deleted successfully"}


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentCreated,
    status_code=201,
    responses={**BAD_REQUEST, **NOT_FOUND},
)
def add_comment(
    ticket_id: str,
    payload: CommentCreate | None = None,
    repo: CommentRepository = Depends(get_comment_repository),
):
    payload = payload or CommentCreate()
    comment_id = repo.add_comment(ticket_id, payload.comment)
    return {"id": comment_id, "message": "Comment added successfully"}
