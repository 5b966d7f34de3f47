"""Turn raw attack-log events into mug records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from hawkeye.models.history import ActionRecord

logger = logging.getLogger(__name__)

MUGGED = "Mugged"

# Preference order for the event time
_TIMESTAMP_FIELDS = ("timestamp_ended", "timestamp", "timestamp_started")


def _event_time(event: Mapping[str, Any]) -> datetime | None:
    for name in _TIMESTAMP_FIELDS:
        value = event.get(name)
        if value:
            try:
                return datetime.fromtimestamp(int(value), UTC)
            except (TypeError, ValueError, OverflowError, OSError):
                continue
    return None


def to_action_record(
    event: Mapping[str, Any], requester_id: str = "",
) -> ActionRecord | None:
    """Map one event, or return None if it is not a money-yielding mug by us."""
    if not isinstance(event, Mapping) or event.get("result") != MUGGED:
        return None
    try:
        money = int(event.get("money") or 0)
    except (TypeError, ValueError):
        return None
    defender = event.get("defender_id")
    if money <= 0 or not defender:
        return None
    if requester_id and str(event.get("attacker_id", requester_id)) != requester_id:
        return None
    ts = _event_time(event)
    if ts is None:
        return None
    return ActionRecord(timestamp=ts, target_id=str(defender), money=money)


def extract_actions(
    events: Mapping[str, Any] | Iterable[Mapping[str, Any]],
    requester_id: str = "",
) -> list[ActionRecord]:
    """Filter and map an attack log, newest first."""
    items = events.values() if isinstance(events, Mapping) else events
    records = []
    skipped = 0
    for event in items:
        record = to_action_record(event, requester_id)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    records.sort(key=lambda r: r.timestamp, reverse=True)
    logger.debug("Ingested %d mugs, skipped %d events", len(records), skipped)
    return records
