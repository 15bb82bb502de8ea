"""Database package - Contact models and the SQLite contact store.

Modules:
    - models: Dataclasses, enumerations and validation
    - database: SQLite connection, contact CRUD and outreach log
"""

from keepwarm.db.models import (
    SEGMENT_CADENCE,
    Contact,
    ContactState,
    Energy,
    Language,
    MessageDraft,
    OutreachAction,
    OutreachEvent,
    Segment,
    Tone,
)

__all__ = [
    # Enums
    "Segment",
    "Energy",
    "Language",
    "Tone",
    "ContactState",
    "OutreachAction",
    # Dataclasses
    "Contact",
    "MessageDraft",
    "OutreachEvent",
    # Constants
    "SEGMENT_CADENCE",
]
