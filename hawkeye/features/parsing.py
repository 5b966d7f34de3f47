"""Normalization of scraped profile text into profile signals."""

from __future__ import annotations

import logging
import re

from hawkeye.errors import ParseFailure
from hawkeye.models.features import MINUTES_CAP, ProfileSignals, ProfileSnapshot

logger = logging.getLogger(__name__)

_JUST_NOW_RE = re.compile(r"just now")
_AGO_RE = re.compile(r"(\d+)\s*(minute|hour|day)")
_ONLINE_RE = re.compile(r"online|just now")
_HOSPITAL_RE = re.compile(r"hospital")
_TRAVEL_RE = re.compile(r"travel|abroad")
_NON_DIGITS_RE = re.compile(r"\D+")


def parse_activity_minutes(text: str) -> int:
    """Minutes since last action from text like "12 minutes ago".

    Capped at MINUTES_CAP: anything measured in days counts as six hours.
    Raises ParseFailure for text without a recognizable duration.
    """
    s = (text or "").lower()
    if _JUST_NOW_RE.search(s):
        return 0
    m = _AGO_RE.search(s)
    if not m:
        raise ParseFailure("last action", text)
    n = int(m.group(1))
    unit = m.group(2)
    if unit == "minute":
        return min(n, MINUTES_CAP)
    if unit == "hour":
        return min(n * 60, MINUTES_CAP)
    return MINUTES_CAP


def parse_level(text: str) -> int:
    """Level from text like "Level 42". Raises ParseFailure without digits."""
    digits = _NON_DIGITS_RE.sub("", text or "")
    if not digits:
        raise ParseFailure("level", text)
    return int(digits)


def is_online(activity_text: str) -> bool:
    return bool(_ONLINE_RE.search((activity_text or "").lower()))


def is_hospitalized(status_text: str) -> bool:
    return bool(_HOSPITAL_RE.search((status_text or "").lower()))


def is_traveling(status_text: str) -> bool:
    return bool(_TRAVEL_RE.search((status_text or "").lower()))


def normalize_profile(snapshot: ProfileSnapshot) -> ProfileSignals:
    """Map a raw snapshot to signals; unparseable fields take safe defaults."""
    try:
        minutes = parse_activity_minutes(snapshot.activity_text)
    except ParseFailure as e:
        logger.debug("%s, assuming inactive", e)
        minutes = MINUTES_CAP
    try:
        level = parse_level(snapshot.level_text)
    except ParseFailure as e:
        logger.debug("%s, assuming 0", e)
        level = 0

    return ProfileSignals(
        minutes_since_active=minutes,
        is_online=is_online(snapshot.activity_text),
        is_hospitalized=is_hospitalized(snapshot.status_text),
        is_traveling=is_traveling(snapshot.status_text),
        level=level,
        is_donator=snapshot.is_donator,
    )
