"""Engine package - Business logic layer.

Modules:
    - cadence: Due-ness and next-due computation
    - transitions: Mark sent / snooze / skip state machine
    - queue: Today's due queue and summary counts
    - templates: Deterministic message drafts (Jinja2)
    - suggestions: Generative-then-template suggestion engine
"""

from keepwarm.engine.cadence import (
    SNOOZE_INTERVAL,
    baseline_due,
    compute_next_due,
    contact_state,
    days_overdue,
    default_frequency,
    is_due,
    is_overdue,
    reassign_segment,
    resolve_now,
)
from keepwarm.engine.queue import (
    TodayQueue,
    build_due_queue,
    build_today,
    count_overdue,
    segment_counts,
)
from keepwarm.engine.transitions import (
    change_segment,
    mark_sent,
    set_frequency,
    skip,
    snooze,
)

__all__ = [
    # Cadence
    "SNOOZE_INTERVAL",
    "baseline_due",
    "compute_next_due",
    "contact_state",
    "days_overdue",
    "default_frequency",
    "is_due",
    "is_overdue",
    "reassign_segment",
    "resolve_now",
    # Transitions
    "change_segment",
    "mark_sent",
    "set_frequency",
    "skip",
    "snooze",
    # Queue
    "TodayQueue",
    "build_due_queue",
    "build_today",
    "count_overdue",
    "segment_counts",
]
