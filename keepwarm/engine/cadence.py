"""Cadence scheduling for contact outreach.

Every contact carries an interval (frequency_days) seeded from its
segment. A contact is due once next_due_at has arrived, or immediately
when it has never been scheduled.

All functions here are pure: they read a Contact and an instant and
never touch the store.

Usage:
    from keepwarm.engine.cadence import is_due, compute_next_due

    if is_due(contact, now):
        next_due = compute_next_due(now, contact.frequency_days)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from keepwarm.core.exceptions import ValidationError
from keepwarm.db.models import (
    SEGMENT_CADENCE,
    Contact,
    ContactState,
    Segment,
    parse_segment,
)

# Short deferral applied by snooze
SNOOZE_INTERVAL = timedelta(days=1)


def resolve_now(now: Optional[datetime]) -> datetime:
    """Default to the current UTC instant; refuse naive datetimes.

    Raises:
        ValidationError: If now has no timezone
    """
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        raise ValidationError("now must be timezone-aware")
    return now


# =============================================================================
# INTERVALS
# =============================================================================


def default_frequency(segment: Union[Segment, str]) -> int:
    """Canonical cadence in days for a segment.

    Raises:
        ValidationError: If the segment is unknown
    """
    return SEGMENT_CADENCE[parse_segment(segment)]


def compute_next_due(reference: datetime, frequency_days: int) -> datetime:
    """Return reference + frequency_days days.

    Used by the initial schedule, mark-sent and skip.

    Args:
        reference: Instant the interval counts from
        frequency_days: Interval length in days

    Returns:
        The next due instant

    Raises:
        ValidationError: If frequency_days is below 1
    """
    if frequency_days < 1:
        raise ValidationError(f"frequency_days must be at least 1, got {frequency_days}")
    return reference + timedelta(days=frequency_days)


def baseline_due(contact: Contact) -> Optional[datetime]:
    """Due date implied by the last credited outreach, or None if never contacted."""
    if contact.last_contacted_at is None or contact.frequency_days is None:
        return None
    return contact.last_contacted_at + timedelta(days=contact.frequency_days)


def reassign_segment(
    segment: Union[Segment, str],
    frequency_days: Optional[int] = None,
) -> dict[str, Any]:
    """Field changes for moving a contact to a new segment.

    The frequency resets to the segment's canonical cadence unless an
    explicit override comes in the same call.

    Raises:
        ValidationError: If the segment is unknown or the override is below 1
    """
    new_segment = parse_segment(segment)
    if frequency_days is None:
        frequency_days = SEGMENT_CADENCE[new_segment]
    elif frequency_days < 1:
        raise ValidationError(f"frequency_days must be at least 1, got {frequency_days}")
    return {"segment": new_segment, "frequency_days": frequency_days}


# =============================================================================
# DUE-NESS
# =============================================================================


def is_due(contact: Contact, now: datetime) -> bool:
    """True if next_due_at is unset or has arrived (next_due_at <= now)."""
    if contact.next_due_at is None:
        return True
    return contact.next_due_at <= now


def is_overdue(contact: Contact, now: datetime) -> bool:
    """True if next_due_at is set and strictly in the past."""
    if contact.next_due_at is None:
        return False
    return contact.next_due_at < now


def days_overdue(contact: Contact, now: datetime) -> int:
    """Whole days elapsed since next_due_at (0 unless overdue)."""
    if not is_overdue(contact, now):
        return 0
    assert contact.next_due_at is not None
    return (now - contact.next_due_at).days


def contact_state(
    contact: Contact,
    now: datetime,
    snooze_interval: timedelta = SNOOZE_INTERVAL,
) -> ContactState:
    """Classify a contact as due, scheduled or snoozed.

    Snoozed means: not due, off the cadence baseline, and coming back
    within one snooze interval. A skip lands a full cadence out, so it
    reads as scheduled.
    """
    if is_due(contact, now):
        return ContactState.DUE
    assert contact.next_due_at is not None
    if contact.next_due_at == baseline_due(contact):
        return ContactState.SCHEDULED
    if contact.next_due_at - now <= snooze_interval:
        return ContactState.SNOOZED
    return ContactState.SCHEDULED
