from datetime import datetime
from typing import Iterable, Tuple
from uuid import uuid4

from loguru import logger

from cashflow.domain import SupportTicket
from cashflow.functional import Either, Left, Right

PRIORITIES = ("low", "medium", "high")


def open_ticket(
    user_id: str, subject: str, message: str, priority: str = "medium", now=None
) -> Either[dict, SupportTicket]:
    """Validate and create a new ticket; it always starts out ``open``."""
    missing = [name for name, value in (("subject", subject), ("message", message)) if not (value or "").strip()]
    if missing:
        return Left({
            "error": "missing_field",
            "message": f"Required: {', '.join(missing)}",
            "fields": missing,
        })

    if priority not in PRIORITIES:
        return Left({
            "error": "invalid_priority",
            "message": f"Priority must be one of {', '.join(PRIORITIES)}",
            "priority": priority,
        })

    ticket = SupportTicket(
        id=uuid4().hex[:8],
        user_id=str(user_id),
        subject=subject.strip(),
        message=message.strip(),
        priority=priority,
        created_at=now or datetime.now(),
    )
    logger.info("support ticket {} opened by user {}", ticket.id, ticket.user_id)
    return Right(ticket)


def add_ticket(
    tickets: Tuple[SupportTicket, ...], ticket: SupportTicket
) -> Tuple[SupportTicket, ...]:
    return tickets + (ticket,)


def tickets_for_user(tickets: Iterable[SupportTicket], user_id: str) -> Tuple[SupportTicket, ...]:
    return tuple(
        sorted(
            (t for t in tickets if t.user_id == str(user_id)),
            key=lambda t: t.created_at or datetime.min,
            reverse=True,
        )
    )


def get_ticket(
    tickets: Iterable[SupportTicket], ticket_id: str, user_id: str
) -> Either[dict, SupportTicket]:
    for t in tickets:
        if t.id != ticket_id:
            continue
        if t.user_id != str(user_id):
            return Left({
                "error": "forbidden",
                "message": "Not authorized to access this ticket",
                "ticket_id": ticket_id,
            })
        return Right(t)

    return Left({
        "error": "not_found",
        "message": "Support ticket not found",
        "ticket_id": ticket_id,
    })
