import json
from datetime import date, datetime
from typing import Iterable, Tuple

from loguru import logger

from cashflow.domain import Notification


def _moment(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value))


def is_targeted(n: Notification, user_id: str) -> bool:
    """True when the notification goes to everyone or lists ``user_id``."""
    targets = (n.target_user_ids or "").strip()
    if not targets or targets == "all":
        return True
    return str(user_id) in [part.strip() for part in targets.split(",")]


def is_live(n: Notification, now) -> bool:
    if not n.is_active:
        return False
    return n.expires_at is None or _moment(n.expires_at) >= _moment(now)


def notifications_for_user(
    notifications: Iterable[Notification], user_id: str, now
) -> Tuple[Notification, ...]:
    """Active, unexpired notifications addressed to the user, newest first."""
    feed = [n for n in notifications if is_live(n, now) and is_targeted(n, user_id)]
    feed.sort(key=lambda n: _moment(n.sent_at) if n.sent_at else datetime.min, reverse=True)
    return tuple(feed)


def load_notifications(path: str) -> Tuple[Notification, ...]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    rows = data.get("notifications", [])
    logger.debug("loaded {} notifications from {}", len(rows), path)
    return tuple(
        Notification(
            **{
                **n,
                "sent_at": _moment(n["sent_at"]) if n.get("sent_at") else None,
                "expires_at": _moment(n["expires_at"]) if n.get("expires_at") else None,
            }
        )
        for n in rows
    )
