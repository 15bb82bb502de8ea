"""SQLite contact store for KeepWarm.

Provides:
    - Connection management with WAL mode
    - Schema creation
    - Contact CRUD (list, search, get, atomic partial update)
    - Outreach event log
    - Re-entrant transactions for per-contact read-modify-write

Usage:
    from keepwarm.db.database import Database

    db = Database()
    db.initialize()

    contact = db.create_contact(Contact(owner_id="me", first_name="Ada", last_name="L"))
    db.update_contact(contact.id, {"working_on": "Analytical engine"})
"""

import dataclasses
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from keepwarm.core.config import DEFAULT_COUNTRY_CODE, get_config
from keepwarm.core.exceptions import DatabaseError, NotFoundError, ValidationError
from keepwarm.core.logging import get_logger
from keepwarm.core.phone import normalize_phone_e164
from keepwarm.db.models import (
    SEGMENT_CADENCE,
    Contact,
    OutreachAction,
    OutreachEvent,
    Segment,
    parse_segment,
    validate_contact,
)

logger = get_logger(__name__)


# Schema version for migrations
SCHEMA_VERSION = 1

# Columns written on insert, in order
CONTACT_COLUMNS = (
    "id",
    "owner_id",
    "first_name",
    "last_name",
    "preferred_name",
    "phone_e164",
    "email",
    "linkedin_url",
    "company",
    "role",
    "city",
    "timezone",
    "segment",
    "importance_score",
    "closeness_score",
    "frequency_days",
    "last_contacted_at",
    "next_due_at",
    "current_situation",
    "working_on",
    "how_i_can_add_value",
    "goals",
    "interests",
    "notes",
    "tags",
    "created_at",
    "updated_at",
)

# Fields a partial update may touch
UPDATABLE_FIELDS = frozenset(CONTACT_COLUMNS) - {"id", "owner_id", "created_at", "updated_at"}

_DATETIME_FIELDS = ("last_contacted_at", "next_due_at", "created_at", "updated_at")


def _to_db_datetime(value: Optional[datetime]) -> Optional[str]:
    """Serialize an aware datetime as a UTC ISO-8601 string."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat()


def _from_db_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO-8601 string back to an aware UTC datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Database:
    """SQLite contact store.

    Attributes:
        db_path: Path to database file
        default_country_code: Calling code applied to national phone numbers
    """

    def __init__(self, db_path: Optional[str] = None, default_country_code: Optional[str] = None):
        """Initialize database.

        Args:
            db_path: Path to database file. Use ":memory:" for in-memory.
                    Defaults to config path.
            default_country_code: Calling code for phones typed without one.
                    Defaults to the config value when db_path is also
                    defaulted, else "1".
        """
        if db_path is None:
            config = get_config()
            self.db_path = str(config.db_path)
            default_country_code = default_country_code or config.default_country_code
        else:
            self.db_path = db_path

        self.default_country_code = default_country_code or DEFAULT_COUNTRY_CODE

        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._tx_depth = 0

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            try:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

                self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
                self._conn.row_factory = sqlite3.Row

                self._conn.execute("PRAGMA foreign_keys = ON")

                if self.db_path != ":memory:":
                    self._conn.execute("PRAGMA journal_mode = WAL")

            except sqlite3.Error as e:
                raise DatabaseError(f"Cannot connect to database: {e}") from e

        return self._conn

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def initialize(self) -> None:
        """Create schema if not exists."""
        conn = self._get_connection()

        try:
            conn.executescript(self._get_schema_ddl())
            conn.commit()
            logger.info("Database initialized", extra={"context": {"path": self.db_path}})
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot initialize database: {e}") from e

    def _get_schema_ddl(self) -> str:
        """Return complete schema DDL."""
        return f"""
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY
        );

        CREATE TABLE IF NOT EXISTS contacts (
            id TEXT PRIMARY KEY,
            owner_id TEXT NOT NULL,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            preferred_name TEXT,
            phone_e164 TEXT,
            email TEXT,
            linkedin_url TEXT,
            company TEXT,
            role TEXT,
            city TEXT,
            timezone TEXT,
            segment TEXT NOT NULL DEFAULT 'MONTHLY100',
            importance_score INTEGER NOT NULL DEFAULT 5,
            closeness_score INTEGER NOT NULL DEFAULT 5,
            frequency_days INTEGER NOT NULL CHECK (frequency_days >= 1),
            last_contacted_at TEXT,
            next_due_at TEXT,
            current_situation TEXT,
            working_on TEXT,
            how_i_can_add_value TEXT,
            goals TEXT,
            interests TEXT,
            notes TEXT,
            tags TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_contacts_owner ON contacts(owner_id);
        CREATE INDEX IF NOT EXISTS idx_contacts_next_due ON contacts(next_due_at);

        CREATE TABLE IF NOT EXISTS outreach_events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            contact_id TEXT NOT NULL REFERENCES contacts(id),
            action TEXT NOT NULL,
            message TEXT,
            next_due_at TEXT,
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_outreach_contact ON outreach_events(contact_id);

        INSERT OR IGNORE INTO schema_version (version) VALUES ({SCHEMA_VERSION});
        """

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block atomically.

        Re-entrant: nested blocks join the outermost transaction, which
        alone commits or rolls back. The lock also serializes concurrent
        callers so read-modify-write on a contact cannot lose updates.
        """
        with self._lock:
            conn = self._get_connection()
            self._tx_depth += 1
            try:
                yield conn
            except BaseException:
                self._tx_depth -= 1
                if self._tx_depth == 0:
                    conn.rollback()
                raise
            self._tx_depth -= 1
            if self._tx_depth == 0:
                try:
                    conn.commit()
                except sqlite3.Error as e:
                    conn.rollback()
                    raise DatabaseError(f"Commit failed: {e}") from e

    # =========================================================================
    # ROW-TO-MODEL HELPERS
    # =========================================================================

    def _row_to_contact(self, row: sqlite3.Row) -> Contact:
        """Convert a database row to a Contact dataclass."""
        seg_val = row["segment"]
        segment = Segment(seg_val) if seg_val else Segment.MONTHLY100

        return Contact(
            id=row["id"],
            owner_id=row["owner_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            preferred_name=row["preferred_name"],
            phone_e164=row["phone_e164"],
            email=row["email"],
            linkedin_url=row["linkedin_url"],
            company=row["company"],
            role=row["role"],
            city=row["city"],
            timezone=row["timezone"],
            segment=segment,
            importance_score=row["importance_score"],
            closeness_score=row["closeness_score"],
            frequency_days=row["frequency_days"],
            last_contacted_at=_from_db_datetime(row["last_contacted_at"]),
            next_due_at=_from_db_datetime(row["next_due_at"]),
            current_situation=row["current_situation"],
            working_on=row["working_on"],
            how_i_can_add_value=row["how_i_can_add_value"],
            goals=row["goals"],
            interests=row["interests"],
            notes=row["notes"],
            tags=row["tags"],
            created_at=_from_db_datetime(row["created_at"]),
            updated_at=_from_db_datetime(row["updated_at"]),
        )

    def _contact_to_values(self, contact: Contact, columns: tuple[str, ...]) -> list[Any]:
        """Flatten contact fields to SQLite-ready values."""
        values: list[Any] = []
        for column in columns:
            value = getattr(contact, column)
            if column in _DATETIME_FIELDS:
                value = _to_db_datetime(value)
            elif column == "segment":
                value = value.value
            values.append(value)
        return values

    def _row_to_outreach_event(self, row: sqlite3.Row) -> OutreachEvent:
        """Convert a database row to an OutreachEvent dataclass."""
        return OutreachEvent(
            id=row["id"],
            contact_id=row["contact_id"],
            action=OutreachAction(row["action"]),
            message=row["message"],
            next_due_at=_from_db_datetime(row["next_due_at"]),
            created_at=_from_db_datetime(row["created_at"]),
        )

    # =========================================================================
    # CONTACT OPERATIONS
    # =========================================================================

    def create_contact(self, contact: Contact) -> Contact:
        """Create a contact record.

        Assigns an id when missing and fills frequency_days from the
        segment's canonical cadence when not supplied. The contact starts
        with whatever history it was given (normally none, so it is due).

        Returns:
            The stored contact

        Raises:
            ValidationError: If the contact breaks a field rule
            DatabaseError: If the insert fails
        """
        if not contact.owner_id:
            raise ValidationError("owner_id is required")

        record = dataclasses.replace(contact)
        record.segment = parse_segment(record.segment)
        if record.id is None:
            record.id = uuid.uuid4().hex
        if record.frequency_days is None:
            record.frequency_days = SEGMENT_CADENCE[record.segment]
        record.phone_e164 = normalize_phone_e164(record.phone_e164, self.default_country_code)
        validate_contact(record)

        now = _utcnow()
        record.created_at = now
        record.updated_at = now

        placeholders = ", ".join("?" for _ in CONTACT_COLUMNS)
        try:
            with self.transaction() as conn:
                conn.execute(
                    f"INSERT INTO contacts ({', '.join(CONTACT_COLUMNS)}) VALUES ({placeholders})",
                    self._contact_to_values(record, CONTACT_COLUMNS),
                )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to create contact: {e}") from e

        logger.info(
            "Contact created",
            extra={"context": {"contact_id": record.id, "name": record.full_name}},
        )
        return record

    def get_contact(self, contact_id: str) -> Contact:
        """Get contact by ID.

        Raises:
            NotFoundError: If no contact has this id
        """
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT * FROM contacts WHERE id = ?", (contact_id,)).fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to read contact: {e}") from e
        if row is None:
            raise NotFoundError(f"Contact {contact_id} not found")
        return self._row_to_contact(row)

    def list_contacts(self, owner_id: str) -> list[Contact]:
        """Get every contact belonging to an owner."""
        conn = self._get_connection()
        try:
            rows = conn.execute(
                """SELECT * FROM contacts
                   WHERE owner_id = ?
                   ORDER BY last_name COLLATE NOCASE, first_name COLLATE NOCASE""",
                (owner_id,),
            ).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to list contacts: {e}") from e
        return [self._row_to_contact(row) for row in rows]

    def search_contacts(self, owner_id: str, term: str) -> list[Contact]:
        """Find an owner's contacts by name, company or role.

        Case-insensitive substring match over first, last and preferred
        name, company and role. Matching uses Unicode casefolding, which
        SQLite's LIKE does not, so "ça" finds "Ça". A blank term returns
        every contact.
        """
        needle = term.strip().casefold()
        contacts = self.list_contacts(owner_id)
        if not needle:
            return contacts
        return [
            contact
            for contact in contacts
            if any(
                needle in (value or "").casefold()
                for value in (
                    contact.first_name,
                    contact.last_name,
                    contact.preferred_name,
                    contact.company,
                    contact.role,
                )
            )
        ]

    def update_contact(self, contact_id: str, fields: dict[str, Any]) -> Contact:
        """Apply a partial update atomically.

        The merged record is validated before anything is written, so
        either every field in ``fields`` changes or none does. Moving a
        contact to another segment without a frequency_days in the same
        call resets its cadence to the new segment's canonical interval.

        Args:
            contact_id: Contact to update
            fields: Column name to new value

        Returns:
            The updated contact

        Raises:
            NotFoundError: If the contact does not exist
            ValidationError: If a field is unknown or the result is invalid
            DatabaseError: If the write fails
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        try:
            with self.transaction() as conn:
                current = self.get_contact(contact_id)
                changes = dict(fields)
                if "segment" in changes:
                    changes["segment"] = parse_segment(changes["segment"])
                    if "frequency_days" not in changes and changes["segment"] != current.segment:
                        changes["frequency_days"] = SEGMENT_CADENCE[changes["segment"]]
                if "phone_e164" in changes:
                    changes["phone_e164"] = normalize_phone_e164(
                        changes["phone_e164"], self.default_country_code
                    )

                merged = dataclasses.replace(current, **changes)
                validate_contact(merged)
                merged.updated_at = _utcnow()

                columns = tuple(sorted(changes)) + ("updated_at",)
                assignments = ", ".join(f"{c} = ?" for c in columns)
                conn.execute(
                    f"UPDATE contacts SET {assignments} WHERE id = ?",
                    self._contact_to_values(merged, columns) + [contact_id],
                )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to update contact: {e}") from e

        logger.debug(
            "Contact updated",
            extra={"context": {"contact_id": contact_id, "fields": sorted(changes)}},
        )
        return merged

    # =========================================================================
    # OUTREACH LOG
    # =========================================================================

    def log_outreach(self, event: OutreachEvent) -> int:
        """Append an outreach event. Returns its id."""
        created_at = event.created_at or _utcnow()
        try:
            with self.transaction() as conn:
                cursor = conn.execute(
                    """INSERT INTO outreach_events
                       (contact_id, action, message, next_due_at, created_at)
                       VALUES (?, ?, ?, ?, ?)""",
                    (
                        event.contact_id,
                        event.action.value,
                        event.message,
                        _to_db_datetime(event.next_due_at),
                        _to_db_datetime(created_at),
                    ),
                )
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to log outreach: {e}") from e
        row_id = cursor.lastrowid
        assert row_id is not None, "lastrowid was None after INSERT"
        return row_id

    def get_outreach_history(self, contact_id: str, limit: int = 50) -> list[OutreachEvent]:
        """Get a contact's outreach events, newest first."""
        conn = self._get_connection()
        try:
            rows = conn.execute(
                """SELECT * FROM outreach_events
                   WHERE contact_id = ?
                   ORDER BY created_at DESC, id DESC
                   LIMIT ?""",
                (contact_id, limit),
            ).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to read outreach history: {e}") from e
        return [self._row_to_outreach_event(row) for row in rows]
