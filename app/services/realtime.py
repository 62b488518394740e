import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Subscriber = Callable[[Dict[str, Any]], None]

_subscribers: Dict[str, List[Subscriber]] = {}

ALL_EVENTS = '*'

def subscribe(callback: Subscriber, event_type: str = ALL_EVENTS) -> None:
    """Register an observer for one event type, or every event with '*'."""
    _subscribers.setdefault(event_type, []).append(callback)

def unsubscribe(callback: Subscriber, event_type: str = ALL_EVENTS) -> None:
    callbacks = _subscribers.get(event_type, [])
    if callback in callbacks:
        callbacks.remove(callback)

def clear_subscribers() -> None:
    _subscribers.clear()

def publish_event(event: Dict[str, Any]) -> None:
    """Deliver one engine event to its observers.

    Observers are outside the engine; a failing observer is logged and skipped
    so it cannot undo an operation that has already applied.
    """
    targets = list(_subscribers.get(event['type'], [])) + list(_subscribers.get(ALL_EVENTS, []))
    for callback in targets:
        try:
            callback(event)
        except Exception as e:
            logger.error(f"Error publishing {event['type']} to {callback!r}: {e}")

def publish_events(events: List[Dict[str, Any]]) -> None:
    for event in events:
        publish_event(event)
