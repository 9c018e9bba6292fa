from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

from loguru import logger

__all__ = [
    'event_bus', 'TRANSACTION_ADDED', 'SPLIT_UPDATED', 'GOAL_UPDATED', 'RESERVE_ALERT',
    'Event', 'EventBus',
]

class Event(NamedTuple):
    name: str
    ts: str
    payload: dict

class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, [])
        if handler not in self._subscribers[name]:
            self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )
        logger.debug("publish {} to {} handler(s)", name, len(self._subscribers[name]))

        results = []
        for handler in self._subscribers[name]:
            result = handler(event, payload)
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)

TRANSACTION_ADDED = "TRANSACTION_ADDED"
SPLIT_UPDATED = "SPLIT_UPDATED"
GOAL_UPDATED = "GOAL_UPDATED"
RESERVE_ALERT = "RESERVE_ALERT"

event_bus = EventBus()

def reserve_delta_handler(event: Event, payload: dict) -> dict:
    amount = payload.get("amount", 0)
    if payload.get("kind") == "expense":
        amount = -amount
    return {"reserve_delta": amount}

def low_reserve_handler(event: Event, payload: dict) -> dict:
    reserve = payload.get("cash_reserve", 0)
    threshold = payload.get("threshold", 0)

    if reserve < threshold and threshold > 0:
        return {
            "type": "alert",
            "text": f"Cash reserve {reserve:,.2f} is below your {threshold:,.2f} safety threshold",
            "cash_reserve": reserve,
            "threshold": threshold
        }
    return {}

def split_tip_handler(event: Event, payload: dict) -> dict:
    split = payload.get("split", {})
    if split.get("tax_reserve", 0) < 10:
        return {
            "type": "tip",
            "text": "Consider keeping at least 10% of profit in your tax reserve"
        }
    return {}

def goal_completed_handler(event: Event, payload: dict) -> dict:
    if payload.get("is_completed") and not payload.get("was_completed"):
        return {
            "type": "tip",
            "text": f"Goal reached: {payload.get('name', '')}",
            "goal_id": payload.get("goal_id")
        }
    return {}

def register_default_handlers():
    event_bus.subscribe(TRANSACTION_ADDED, reserve_delta_handler)
    event_bus.subscribe(SPLIT_UPDATED, split_tip_handler)
    event_bus.subscribe(GOAL_UPDATED, goal_completed_handler)
    event_bus.subscribe(RESERVE_ALERT, low_reserve_handler)

register_default_handlers()
