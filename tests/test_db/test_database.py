"""Tests for the SQLite contact store."""

from datetime import timedelta

import pytest

from keepwarm.core.exceptions import NotFoundError, ValidationError
from keepwarm.db.database import Database
from keepwarm.db.models import Contact, OutreachAction, OutreachEvent, Segment

OWNER_ID = "owner-1"


class TestSchema:
    def test_initialize_is_idempotent(self, memory_db):
        memory_db.initialize()
        assert memory_db.list_contacts(OWNER_ID) == []

    def test_file_database_created(self, tmp_path):
        db = Database(str(tmp_path / "nested" / "kw.db"))
        db.initialize()
        db.close()
        assert (tmp_path / "nested" / "kw.db").exists()


class TestCreateContact:
    def test_assigns_id_and_frequency(self, memory_db, sample_contact):
        stored = memory_db.create_contact(sample_contact)
        assert stored.id
        assert stored.frequency_days == 3
        assert stored.created_at is not None
        assert stored.created_at == stored.updated_at

    def test_does_not_mutate_input(self, memory_db, sample_contact):
        memory_db.create_contact(sample_contact)
        assert sample_contact.id is None

    def test_normalizes_phone(self, stored_contact):
        assert stored_contact.phone_e164 == "+15125550134"

    def test_national_number_uses_configured_country(self, sample_contact):
        db = Database(":memory:", default_country_code="33")
        db.initialize()
        sample_contact.phone_e164 = "06 12 34 56 78"
        assert db.create_contact(sample_contact).phone_e164 == "+33612345678"
        db.close()

    def test_national_number_rejected_without_country(self, memory_db, sample_contact):
        sample_contact.phone_e164 = "06 12 34 56 78"
        with pytest.raises(ValidationError, match="country code"):
            memory_db.create_contact(sample_contact)

    def test_explicit_frequency_kept(self, memory_db, sample_contact):
        sample_contact.frequency_days = 5
        assert memory_db.create_contact(sample_contact).frequency_days == 5

    def test_owner_required(self, memory_db, sample_contact):
        sample_contact.owner_id = ""
        with pytest.raises(ValidationError):
            memory_db.create_contact(sample_contact)

    def test_invalid_not_stored(self, memory_db, sample_contact):
        sample_contact.importance_score = 42
        with pytest.raises(ValidationError):
            memory_db.create_contact(sample_contact)
        assert memory_db.list_contacts(OWNER_ID) == []


class TestGetContact:
    def test_round_trip(self, memory_db, stored_contact):
        loaded = memory_db.get_contact(stored_contact.id)
        assert loaded == stored_contact
        assert loaded.segment is Segment.TOP5

    def test_missing(self, memory_db):
        with pytest.raises(NotFoundError):
            memory_db.get_contact("nope")


class TestListContacts:
    def test_scoped_to_owner_and_sorted(self, memory_db):
        for first, last, owner in [
            ("Zoe", "adams", OWNER_ID),
            ("Ann", "Baker", OWNER_ID),
            ("Bob", "Adams", OWNER_ID),
            ("Eve", "Other", "someone-else"),
        ]:
            memory_db.create_contact(Contact(owner_id=owner, first_name=first, last_name=last))

        names = [c.full_name for c in memory_db.list_contacts(OWNER_ID)]
        assert names == ["Bob Adams", "Zoe adams", "Ann Baker"]


class TestSearchContacts:
    """Case-insensitive match on names, company and role."""

    @pytest.fixture
    def people(self, memory_db):
        for contact in [
            Contact(
                owner_id=OWNER_ID,
                first_name="Michael",
                last_name="Rodriguez",
                preferred_name="Mike",
                company="GrowthCorp",
                role="CMO",
            ),
            Contact(
                owner_id=OWNER_ID,
                first_name="François",
                last_name="Ça",
                company="Boulangerie",
                role="Founder",
            ),
            Contact(owner_id=OWNER_ID, first_name="Ann", last_name="Baker", role="Engineer"),
            Contact(owner_id="someone-else", first_name="Mike", last_name="Other"),
        ]:
            memory_db.create_contact(contact)
        return memory_db

    def _names(self, db, term):
        return [c.full_name for c in db.search_contacts(OWNER_ID, term)]

    @pytest.mark.parametrize(
        "term,expected",
        [
            ("rodri", ["Michael Rodriguez"]),
            ("MIKE", ["Michael Rodriguez"]),
            ("growthcorp", ["Michael Rodriguez"]),
            ("founder", ["François Ça"]),
            ("engineer", ["Ann Baker"]),
            ("ça", ["François Ça"]),
            ("  baker ", ["Ann Baker"]),
        ],
    )
    def test_matches(self, people, term, expected):
        assert self._names(people, term) == expected

    def test_other_owners_excluded(self, people):
        assert self._names(people, "Other") == []

    def test_blank_term_lists_all(self, people):
        assert self._names(people, "  ") == [c.full_name for c in people.list_contacts(OWNER_ID)]

    def test_no_match(self, people):
        assert self._names(people, "zzz") == []


class TestUpdateContact:
    """Atomic partial updates."""

    def test_partial_update(self, memory_db, stored_contact):
        updated = memory_db.update_contact(stored_contact.id, {"working_on": "Podcast"})

        assert updated.working_on == "Podcast"
        assert updated.company == stored_contact.company
        assert memory_db.get_contact(stored_contact.id).working_on == "Podcast"

    def test_bumps_updated_at(self, memory_db, stored_contact):
        updated = memory_db.update_contact(stored_contact.id, {"notes": "hi"})
        assert updated.updated_at >= stored_contact.updated_at
        assert updated.created_at == stored_contact.created_at

    def test_datetimes_round_trip(self, memory_db, stored_contact, now):
        memory_db.update_contact(stored_contact.id, {"next_due_at": now + timedelta(days=2)})
        assert memory_db.get_contact(stored_contact.id).next_due_at == now + timedelta(days=2)

    def test_segment_string_accepted(self, memory_db, stored_contact):
        updated = memory_db.update_contact(stored_contact.id, {"segment": "weekly15"})
        assert memory_db.get_contact(stored_contact.id).segment == Segment.WEEKLY15
        assert updated.segment == Segment.WEEKLY15

    def test_segment_change_resets_frequency(self, memory_db, sample_contact):
        sample_contact.segment = Segment.MONTHLY100
        stored = memory_db.create_contact(sample_contact)
        assert stored.frequency_days == 30

        updated = memory_db.update_contact(stored.id, {"segment": "TOP5"})

        assert updated.frequency_days == 3
        assert memory_db.get_contact(stored.id).frequency_days == 3

    def test_explicit_frequency_wins_over_segment_default(self, memory_db, stored_contact):
        updated = memory_db.update_contact(
            stored_contact.id, {"segment": Segment.MONTHLY100, "frequency_days": 45}
        )
        assert updated.frequency_days == 45

    def test_same_segment_keeps_custom_frequency(self, memory_db, stored_contact):
        memory_db.update_contact(stored_contact.id, {"frequency_days": 5})
        updated = memory_db.update_contact(stored_contact.id, {"segment": "top5"})
        assert updated.frequency_days == 5

    def test_phone_normalized(self, memory_db, stored_contact):
        updated = memory_db.update_contact(stored_contact.id, {"phone_e164": "00 33 6 12 34 56 78"})
        assert updated.phone_e164 == "+33612345678"

    @pytest.mark.parametrize("field", ["id", "owner_id", "created_at", "nickname"])
    def test_protected_or_unknown_fields(self, memory_db, stored_contact, field):
        with pytest.raises(ValidationError, match=field):
            memory_db.update_contact(stored_contact.id, {field: "x"})

    def test_invalid_change_writes_nothing(self, memory_db, stored_contact):
        with pytest.raises(ValidationError):
            memory_db.update_contact(
                stored_contact.id, {"working_on": "Changed", "frequency_days": 0}
            )
        assert memory_db.get_contact(stored_contact.id).working_on == stored_contact.working_on

    def test_missing(self, memory_db):
        with pytest.raises(NotFoundError):
            memory_db.update_contact("nope", {"notes": "x"})


class TestTransaction:
    def test_rollback_on_error(self, memory_db, stored_contact):
        with pytest.raises(RuntimeError):
            with memory_db.transaction():
                memory_db.update_contact(stored_contact.id, {"notes": "temporary"})
                raise RuntimeError("abort")
        assert memory_db.get_contact(stored_contact.id).notes is None

    def test_nested_joins_outer(self, memory_db, stored_contact):
        with pytest.raises(RuntimeError):
            with memory_db.transaction():
                with memory_db.transaction():
                    memory_db.update_contact(stored_contact.id, {"notes": "inner"})
                raise RuntimeError("abort outer")
        assert memory_db.get_contact(stored_contact.id).notes is None

    def test_commit(self, memory_db, stored_contact):
        with memory_db.transaction():
            memory_db.update_contact(stored_contact.id, {"notes": "kept"})
        assert memory_db.get_contact(stored_contact.id).notes == "kept"


class TestOutreachLog:
    def test_history_newest_first(self, memory_db, stored_contact, now):
        for offset, action in enumerate(
            [OutreachAction.SNOOZE, OutreachAction.SKIP, OutreachAction.MARK_SENT]
        ):
            memory_db.log_outreach(
                OutreachEvent(
                    contact_id=stored_contact.id,
                    action=action,
                    created_at=now + timedelta(hours=offset),
                )
            )

        history = memory_db.get_outreach_history(stored_contact.id)
        assert [e.action for e in history] == [
            OutreachAction.MARK_SENT,
            OutreachAction.SKIP,
            OutreachAction.SNOOZE,
        ]
        assert history[0].created_at == now + timedelta(hours=2)

    def test_limit(self, memory_db, stored_contact, now):
        for _ in range(3):
            memory_db.log_outreach(
                OutreachEvent(contact_id=stored_contact.id, action=OutreachAction.SKIP)
            )
        assert len(memory_db.get_outreach_history(stored_contact.id, limit=2)) == 2

    def test_returns_id(self, memory_db, stored_contact):
        event_id = memory_db.log_outreach(
            OutreachEvent(contact_id=stored_contact.id, action=OutreachAction.SNOOZE)
        )
        assert event_id >= 1
