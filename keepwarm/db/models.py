"""Data models and enumerations for KeepWarm.

All enums stored as TEXT in SQLite.
Dataclasses use frozen=False for mutability during processing.

This module defines:
    - Enumerations for all categorical fields
    - Dataclasses for contact and outreach records
    - Validation and parsing helpers
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from keepwarm.core.exceptions import ValidationError

# =============================================================================
# ENUMERATIONS
# =============================================================================


class Segment(str, Enum):
    """Coarse relationship priority.

    Values:
        TOP5: Innermost circle, canonical cadence 3 days
        WEEKLY15: Close network, canonical cadence 7 days
        MONTHLY100: Wider network, canonical cadence 30 days
    """

    TOP5 = "TOP5"
    WEEKLY15 = "WEEKLY15"
    MONTHLY100 = "MONTHLY100"


class Energy(str, Enum):
    """How much effort the owner wants to put into a message."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Language(str, Enum):
    """Language a message is drafted in."""

    EN = "en"
    FR = "fr"


class Tone(str, Enum):
    """Register of a drafted message. Informational only."""

    WARM = "warm"
    PROFESSIONAL = "professional"
    CASUAL = "casual"


class ContactState(str, Enum):
    """Where a contact sits in the outreach cycle.

    Never persisted; derived from last_contacted_at, next_due_at and now.
    """

    DUE = "due"
    SCHEDULED = "scheduled"
    SNOOZED = "snoozed"


class OutreachAction(str, Enum):
    """User action recorded in the outreach log."""

    MARK_SENT = "mark_sent"
    SNOOZE = "snooze"
    SKIP = "skip"


# Canonical cadence (days) per segment
SEGMENT_CADENCE: dict[Segment, int] = {
    Segment.TOP5: 3,
    Segment.WEEKLY15: 7,
    Segment.MONTHLY100: 30,
}

# Score bounds for importance and closeness
SCORE_MIN = 1
SCORE_MAX = 10


# =============================================================================
# PARSING
# =============================================================================


def parse_segment(value: Union[str, Segment]) -> Segment:
    """Parse a segment value, accepting any letter case.

    Raises:
        ValidationError: If the value is not a known segment
    """
    if isinstance(value, Segment):
        return value
    try:
        return Segment(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unknown segment {value!r}. Expected one of: "
            f"{', '.join(s.value for s in Segment)}"
        )


def parse_energy(value: Union[str, Energy]) -> Energy:
    """Parse an energy level (low/medium/high).

    Raises:
        ValidationError: If the value is not a known energy level
    """
    if isinstance(value, Energy):
        return value
    try:
        return Energy(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown energy level {value!r}")


def parse_language(value: Union[str, Language]) -> Language:
    """Parse a language code (en/fr).

    Raises:
        ValidationError: If the language is not supported
    """
    if isinstance(value, Language):
        return value
    try:
        return Language(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unsupported language {value!r}")


# =============================================================================
# DATACLASSES
# =============================================================================


@dataclass
class Contact:
    """A person in the owner's network.

    Attributes:
        id: Opaque unique id (assigned by the store)
        owner_id: Person maintaining the network
        first_name: First name (required)
        last_name: Last name (required)
        preferred_name: Name used in messages when present
        phone_e164: Phone in "+<digits>" format
        email: Email address
        linkedin_url: Social profile URL
        company: Employer
        role: Job title
        city: City
        timezone: IANA timezone name
        segment: Relationship priority
        importance_score: 1-10
        closeness_score: 1-10
        frequency_days: Days between outreach (authoritative interval)
        last_contacted_at: Last credited outreach (None = never)
        next_due_at: Next scheduled outreach (None = due now)
        current_situation: What is going on in their life
        working_on: Current project
        how_i_can_add_value: What the owner can offer them
        goals: Their goals
        interests: Their interests
        notes: Free-form notes
        tags: Comma-separated tags
        created_at: Record creation time
        updated_at: Last update time
    """

    id: Optional[str] = None
    owner_id: str = ""
    first_name: str = ""
    last_name: str = ""
    preferred_name: Optional[str] = None
    phone_e164: Optional[str] = None
    email: Optional[str] = None
    linkedin_url: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    city: Optional[str] = None
    timezone: Optional[str] = None
    segment: Segment = Segment.MONTHLY100
    importance_score: int = 5
    closeness_score: int = 5
    frequency_days: Optional[int] = None
    last_contacted_at: Optional[datetime] = None
    next_due_at: Optional[datetime] = None
    current_situation: Optional[str] = None
    working_on: Optional[str] = None
    how_i_can_add_value: Optional[str] = None
    goals: Optional[str] = None
    interests: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Preferred name if present, else first name."""
        if self.preferred_name and self.preferred_name.strip():
            return self.preferred_name.strip()
        return self.first_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return [t.strip() for t in self.tags.split(",") if t.strip()]


@dataclass
class MessageDraft:
    """One suggested outreach message.

    Attributes:
        text: Message body, ready to paste or send
        tone: Register label
    """

    text: str
    tone: Tone


@dataclass
class OutreachEvent:
    """Append-only record of a state transition.

    Attributes:
        id: Primary key
        contact_id: Contact acted on
        action: Which transition ran
        message: Text sent (mark_sent only)
        next_due_at: Due date after the transition
        created_at: When the action happened
    """

    id: Optional[int] = None
    contact_id: str = ""
    action: OutreachAction = OutreachAction.MARK_SENT
    message: Optional[str] = None
    next_due_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


# =============================================================================
# VALIDATION
# =============================================================================


def validate_contact(contact: Contact) -> None:
    """Check a contact's field-level rules.

    Raises:
        ValidationError: On the first rule violated
    """
    if not contact.first_name or not contact.first_name.strip():
        raise ValidationError("first_name is required")
    if not contact.last_name or not contact.last_name.strip():
        raise ValidationError("last_name is required")

    contact.segment = parse_segment(contact.segment)

    if contact.frequency_days is None:
        raise ValidationError("frequency_days is required")
    if isinstance(contact.frequency_days, bool) or not isinstance(contact.frequency_days, int):
        raise ValidationError(f"frequency_days must be an integer, got {contact.frequency_days!r}")
    if contact.frequency_days < 1:
        raise ValidationError(f"frequency_days must be at least 1, got {contact.frequency_days}")

    for name in ("importance_score", "closeness_score"):
        score = getattr(contact, name)
        if not isinstance(score, int) or not SCORE_MIN <= score <= SCORE_MAX:
            raise ValidationError(
                f"{name} must be between {SCORE_MIN} and {SCORE_MAX}, got {score!r}"
            )

    for name in ("last_contacted_at", "next_due_at"):
        value = getattr(contact, name)
        if value is not None and value.tzinfo is None:
            raise ValidationError(f"{name} must be timezone-aware")
