"""Event persistence and dispatch."""

from __future__ import annotations

from typing import Optional

from bazaar.core.events.event_bus import event_bus
from bazaar.core.events.event_models import EventRecord
from bazaar.extensions import db


def log_event(event_type: str, payload: dict, account_id: Optional[str] = None) -> EventRecord:
    """Stage an event alongside the caller's changes and publish to subscribers.

    The caller owns the commit so the event lands with the domain change.
    """
    record = EventRecord(event_type=event_type, payload=payload or {}, account_id=account_id)
    db.session.add(record)
    event_bus.publish(record)
    return record
