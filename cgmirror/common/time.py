"""Timestamp helpers for GitHub activity times.

GitHub reports repository activity as RFC 3339 strings such as
``2021-06-01T00:00:00Z``. The catalog stores those strings verbatim so that a
value which fails to parse can still be carried through a run; the helpers
here decide how such values compare.
"""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def parse_rfc3339(value: str | None) -> dt.datetime | None:
    """Parse an RFC 3339 timestamp, returning ``None`` when it is unusable.

    Parameters
    ----------
    value:
        Timestamp string as reported by GitHub, or ``None``.

    Returns
    -------
    datetime.datetime | None
        An aware UTC datetime, or ``None`` when the value is missing, malformed,
        or lacks a UTC offset.

    Examples
    --------
    >>> parse_rfc3339("2021-01-01T00:00:00Z").isoformat()
    '2021-01-01T00:00:00+00:00'
    >>> parse_rfc3339("yesterday") is None
    True

    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = dt.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed.astimezone(dt.UTC)


def latest_timestamp(updated_at: str, pushed_at: str | None) -> str:
    """Return whichever of ``updated_at`` and ``pushed_at`` is later.

    When only one of the two values parses, that value wins. When neither
    parses, ``updated_at`` is returned unchanged so callers can still persist
    it.

    Examples
    --------
    >>> latest_timestamp("2021-01-01T00:00:00Z", "2021-06-01T00:00:00Z")
    '2021-06-01T00:00:00Z'
    >>> latest_timestamp("2021-01-01T00:00:00Z", "not-a-date")
    '2021-01-01T00:00:00Z'

    """
    updated = parse_rfc3339(updated_at)
    pushed = parse_rfc3339(pushed_at)

    if pushed is None or pushed_at is None:
        return updated_at
    if updated is None or pushed > updated:
        return pushed_at
    return updated_at


def is_earlier(stored: str, candidate: str) -> bool:
    """Return True when ``stored`` is strictly earlier than ``candidate``.

    Two parsable timestamps are compared as instants, so offsets and
    fractional seconds are honoured and equal instants are not earlier. If
    either side fails to parse the comparison falls back to plain string
    ordering.
    """
    stored_at = parse_rfc3339(stored)
    candidate_at = parse_rfc3339(candidate)
    if stored_at is None or candidate_at is None:
        return stored < candidate
    return stored_at < candidate_at
