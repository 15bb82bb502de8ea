"""Today's outreach queue.

Builds the ordered list of due contacts plus the summary figures
shown above it (overdue count, per-segment totals, daily capacity).
Read-only: nothing here mutates contacts, so it is safe to rebuild
after every transition.

Ordering:
    1. importance_score, highest first
    2. next_due_at, earliest first (never scheduled sorts before any date)

Usage:
    from keepwarm.engine.queue import build_today

    today = build_today(db, owner_id="me")
    for contact in today.contacts:
        ...
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from keepwarm.core.config import get_config
from keepwarm.core.logging import get_logger
from keepwarm.db.database import Database
from keepwarm.db.models import Contact, Segment
from keepwarm.engine.cadence import is_due, is_overdue, resolve_now

logger = get_logger(__name__)


@dataclass
class TodayQueue:
    """Contacts due today with summary counts.

    Attributes:
        contacts: Due contacts in presentation order
        due_count: len(contacts)
        overdue_count: Due contacts whose date strictly passed
        segment_counts: All contacts per segment, due or not
        daily_capacity: Outreach the owner aims for per day
        generated_at: Instant the queue was computed for
    """

    contacts: list[Contact] = field(default_factory=list)
    due_count: int = 0
    overdue_count: int = 0
    segment_counts: dict[Segment, int] = field(default_factory=dict)
    daily_capacity: int = 0
    generated_at: Optional[datetime] = None

    @property
    def over_capacity(self) -> bool:
        return self.due_count > self.daily_capacity


def _queue_key(contact: Contact) -> tuple[int, int, float]:
    # Never-scheduled contacts come first within an importance band
    if contact.next_due_at is None:
        return (-contact.importance_score, 0, 0.0)
    return (-contact.importance_score, 1, contact.next_due_at.timestamp())


def build_due_queue(contacts: Iterable[Contact], now: datetime) -> list[Contact]:
    """Due contacts ordered by importance, then earliest due date."""
    due = [c for c in contacts if is_due(c, now)]
    due.sort(key=_queue_key)
    return due


def count_overdue(contacts: Iterable[Contact], now: datetime) -> int:
    return sum(1 for c in contacts if is_overdue(c, now))


def segment_counts(contacts: Iterable[Contact]) -> dict[Segment, int]:
    """Count contacts per segment. Every segment appears, zero-filled."""
    counts = {segment: 0 for segment in Segment}
    for contact in contacts:
        counts[contact.segment] += 1
    return counts


def build_today(
    db: Database,
    owner_id: str,
    now: Optional[datetime] = None,
    capacity: Optional[int] = None,
) -> TodayQueue:
    """Load an owner's contacts and build today's queue.

    Args:
        db: Contact store
        owner_id: Whose network to look at
        now: Instant to evaluate due-ness at (defaults to now, UTC)
        capacity: Daily capacity (defaults to config)

    Returns:
        TodayQueue for display

    Raises:
        ValidationError: If now is naive
    """
    now = resolve_now(now)
    if capacity is None:
        capacity = get_config().daily_capacity

    contacts = db.list_contacts(owner_id)
    due = build_due_queue(contacts, now)
    queue = TodayQueue(
        contacts=due,
        due_count=len(due),
        overdue_count=count_overdue(due, now),
        segment_counts=segment_counts(contacts),
        daily_capacity=capacity,
        generated_at=now,
    )

    logger.debug(
        "Queue built",
        extra={
            "context": {
                "owner_id": owner_id,
                "due": queue.due_count,
                "overdue": queue.overdue_count,
            }
        },
    )
    return queue
