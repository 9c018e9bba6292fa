from datetime import date, datetime

from cashflow.domain import Notification
from cashflow.notifications import is_targeted, load_notifications, notifications_for_user

NOW = datetime(2025, 9, 15, 12, 0)


def make_notification(nid="n1", **overrides):
    values = dict(title="Heads up", message="Something happened", sent_at=datetime(2025, 9, 1))
    values.update(overrides)
    return Notification(nid, **values)


def test_broadcast_reaches_everyone():
    assert is_targeted(make_notification(target_user_ids="all"), "7")
    assert is_targeted(make_notification(target_user_ids=""), "7")


def test_comma_separated_targets_are_trimmed():
    n = make_notification(target_user_ids="3, 7 ,12")
    assert is_targeted(n, "7")
    assert is_targeted(n, 12)
    assert not is_targeted(n, "1")


def test_feed_hides_inactive_expired_and_foreign():
    feed = notifications_for_user(
        (
            make_notification("n1"),
            make_notification("n2", is_active=False),
            make_notification("n3", expires_at=datetime(2025, 9, 14)),
            make_notification("n4", target_user_ids="99"),
            make_notification("n5", expires_at=date(2025, 12, 1)),
        ),
        "7",
        NOW,
    )
    assert [n.id for n in feed] == ["n1", "n5"]


def test_feed_keeps_notification_expiring_right_now():
    feed = notifications_for_user((make_notification(expires_at=NOW),), "7", NOW)
    assert len(feed) == 1


def test_feed_newest_first():
    feed = notifications_for_user(
        (
            make_notification("old", sent_at=datetime(2025, 8, 1)),
            make_notification("new", sent_at=datetime(2025, 9, 10)),
            make_notification("undated", sent_at=None),
        ),
        "7",
        NOW,
    )
    assert [n.id for n in feed] == ["new", "old", "undated"]


def test_load_notifications_from_seed():
    notes = load_notifications("data/seed.json")

    assert len(notes) == 3
    assert all(isinstance(n.sent_at, datetime) for n in notes)
    assert [n.id for n in notifications_for_user(notes, "demo", NOW)] == ["n2", "n1"]
