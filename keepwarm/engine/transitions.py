"""Outreach state transitions: mark sent, snooze, skip.

Each contact is implicitly in one of three states (due, scheduled,
snoozed), derived from its (last_contacted_at, next_due_at) pair:

    Mark Sent: credits outreach. last_contacted_at = now,
               next_due_at = now + frequency_days
    Snooze:    short deferral. next_due_at = base + SNOOZE_INTERVAL
    Skip:      full-cadence deferral. next_due_at = base + frequency_days

base is now, or the current next_due_at when that is still ahead, so
both deferrals always move the due date later.

Only Mark Sent touches last_contacted_at. Every transition is a single
store transaction together with its outreach log entry, so a contact
never ends up half-updated.

Usage:
    from keepwarm.engine.transitions import mark_sent, snooze, skip

    contact = mark_sent(db, contact_id, message="Hey Sam! Coffee next week?")
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Union

from keepwarm.core.exceptions import ValidationError
from keepwarm.core.logging import get_logger
from keepwarm.db.database import Database
from keepwarm.db.models import Contact, OutreachAction, OutreachEvent, Segment
from keepwarm.engine.cadence import (
    SNOOZE_INTERVAL,
    compute_next_due,
    reassign_segment,
    resolve_now,
)

logger = get_logger(__name__)


def _deferral_base(contact: Contact, now: datetime) -> datetime:
    # A contact already scheduled past now is deferred from its own date
    if contact.next_due_at is not None and contact.next_due_at > now:
        return contact.next_due_at
    return now


def _apply(
    db: Database,
    contact_id: str,
    action: OutreachAction,
    now: datetime,
    changes_for: Callable[[Contact], dict[str, Any]],
    message: Optional[str] = None,
) -> Contact:
    """Read, compute, write and log in one transaction."""
    with db.transaction():
        contact = db.get_contact(contact_id)
        changes = changes_for(contact)
        updated = db.update_contact(contact_id, changes)
        db.log_outreach(
            OutreachEvent(
                contact_id=contact_id,
                action=action,
                message=message,
                next_due_at=updated.next_due_at,
                created_at=now,
            )
        )

    logger.info(
        f"Contact {action.value}",
        extra={
            "context": {
                "contact_id": contact_id,
                "next_due_at": updated.next_due_at.isoformat() if updated.next_due_at else None,
            }
        },
    )
    return updated


def mark_sent(
    db: Database,
    contact_id: str,
    message: str = "",
    now: Optional[datetime] = None,
) -> Contact:
    """Record that a message went out and schedule the next one.

    An empty message is accepted; the UI normally passes the chosen draft.

    Args:
        db: Contact store
        contact_id: Contact that was messaged
        message: Text that was sent
        now: Instant of sending (defaults to now, UTC)

    Returns:
        The updated contact

    Raises:
        NotFoundError: If the contact does not exist
    """
    now = resolve_now(now)
    if not message.strip():
        logger.debug(
            "Mark sent without message text", extra={"context": {"contact_id": contact_id}}
        )

    return _apply(
        db,
        contact_id,
        OutreachAction.MARK_SENT,
        now,
        lambda c: {
            "last_contacted_at": now,
            "next_due_at": compute_next_due(now, c.frequency_days),
        },
        message=message or None,
    )


def snooze(
    db: Database,
    contact_id: str,
    now: Optional[datetime] = None,
    interval: timedelta = SNOOZE_INTERVAL,
) -> Contact:
    """Push a contact back by a short interval without crediting outreach.

    A contact scheduled in the future is pushed back from that date,
    so the due date always moves later.

    Raises:
        NotFoundError: If the contact does not exist
        ValidationError: If the interval is not positive
    """
    now = resolve_now(now)
    if interval <= timedelta(0):
        raise ValidationError("Snooze interval must be positive")

    return _apply(
        db,
        contact_id,
        OutreachAction.SNOOZE,
        now,
        lambda c: {"next_due_at": _deferral_base(c, now) + interval},
    )


def skip(
    db: Database,
    contact_id: str,
    now: Optional[datetime] = None,
) -> Contact:
    """Defer a contact by a full cadence without crediting outreach.

    Models "I chose not to reach out this cycle". Like snooze, a contact
    already scheduled in the future is deferred from its own date.

    Raises:
        NotFoundError: If the contact does not exist
    """
    now = resolve_now(now)

    return _apply(
        db,
        contact_id,
        OutreachAction.SKIP,
        now,
        lambda c: {"next_due_at": compute_next_due(_deferral_base(c, now), c.frequency_days)},
    )


def change_segment(
    db: Database,
    contact_id: str,
    segment: Union[Segment, str],
    frequency_days: Optional[int] = None,
) -> Contact:
    """Move a contact to another segment.

    frequency_days resets to the segment's canonical cadence unless an
    override is given. The schedule fields are left alone; the new
    interval applies from the next mark-sent or skip.

    Raises:
        NotFoundError: If the contact does not exist
        ValidationError: If the segment or override is invalid
    """
    changes = reassign_segment(segment, frequency_days)
    updated = db.update_contact(contact_id, changes)
    logger.info(
        "Segment changed",
        extra={
            "context": {
                "contact_id": contact_id,
                "segment": updated.segment.value,
                "frequency_days": updated.frequency_days,
            }
        },
    )
    return updated


def set_frequency(db: Database, contact_id: str, frequency_days: int) -> Contact:
    """Override a contact's cadence while keeping its segment.

    Raises:
        NotFoundError: If the contact does not exist
        ValidationError: If frequency_days is below 1
    """
    return db.update_contact(contact_id, {"frequency_days": frequency_days})
