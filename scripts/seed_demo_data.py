"""Create a small demo database for manual smoke checks.

The first three contacts come out overdue; the rest are mid-cycle.
Relationship scores use the 1-10 scale.
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from keepwarm.db.database import Database
from keepwarm.db.models import SEGMENT_CADENCE, Contact, Segment

DEMO_CONTACTS: list[dict] = [
    {
        "first_name": "Sarah",
        "last_name": "Chen",
        "phone_e164": "+1234567890",
        "email": "sarah.chen@techcorp.com",
        "linkedin_url": "https://linkedin.com/in/sarahchen",
        "company": "TechCorp",
        "role": "VP of Engineering",
        "city": "San Francisco",
        "timezone": "America/Los_Angeles",
        "segment": Segment.TOP5,
        "importance_score": 10,
        "closeness_score": 9,
        "current_situation": "Leading AI initiative",
        "working_on": "Machine learning platform",
        "how_i_can_add_value": "Product strategy insights",
        "goals": "Scale engineering team to 200+",
        "interests": "AI, hiking, wine tasting",
        "notes": "Former colleague from StartupX.",
        "tags": "tech,ai,leadership",
    },
    {
        "first_name": "Michael",
        "last_name": "Rodriguez",
        "preferred_name": "Mike",
        "phone_e164": "+1234567891",
        "email": "mike@growthcorp.com",
        "company": "GrowthCorp",
        "role": "CMO",
        "city": "Austin",
        "segment": Segment.TOP5,
        "importance_score": 9,
        "closeness_score": 8,
        "current_situation": "Expanding to new markets",
        "working_on": "Q1 marketing campaign",
        "how_i_can_add_value": "Growth hacking strategies",
        "interests": "Marketing, soccer, cooking",
        "notes": "Great connector. Always willing to make introductions.",
        "tags": "marketing,growth,connector",
    },
    {
        "first_name": "Emily",
        "last_name": "Thompson",
        "phone_e164": "+1234567892",
        "email": "emily.thompson@designstudio.com",
        "company": "Design Studio",
        "role": "Creative Director",
        "city": "New York",
        "segment": Segment.WEEKLY15,
        "importance_score": 7,
        "closeness_score": 8,
        "working_on": "Rebranding project",
        "how_i_can_add_value": "UX research connections",
        "interests": "Design, photography, travel",
    },
    {
        "first_name": "David",
        "last_name": "Kim",
        "phone_e164": "+1234567893",
        "email": "david@venture.fund",
        "company": "Venture Fund",
        "role": "Partner",
        "city": "Palo Alto",
        "segment": Segment.WEEKLY15,
        "importance_score": 8,
        "closeness_score": 7,
        "current_situation": "Raising new fund",
        "working_on": "Series A investments",
        "how_i_can_add_value": "Deal flow insights",
        "tags": "vc,funding,investor",
    },
    {
        "first_name": "Lisa",
        "last_name": "Wang",
        "phone_e164": "+1234567894",
        "email": "lisa.wang@consultant.com",
        "company": "Strategic Consulting",
        "role": "Senior Consultant",
        "city": "Chicago",
        "segment": Segment.MONTHLY100,
        "importance_score": 6,
        "closeness_score": 6,
        "working_on": "Digital transformation projects",
        "how_i_can_add_value": "Technology introductions",
    },
    {
        "first_name": "James",
        "last_name": "Foster",
        "phone_e164": "+1234567895",
        "email": "james@techstartup.com",
        "company": "TechStartup",
        "role": "Founder & CEO",
        "city": "Seattle",
        "segment": Segment.WEEKLY15,
        "importance_score": 8,
        "closeness_score": 7,
        "current_situation": "Post Series B growth",
        "working_on": "International expansion",
        "how_i_can_add_value": "Market entry strategies",
        "tags": "startup,founder,ceo",
    },
    {
        "first_name": "Camille",
        "last_name": "Durand",
        "phone_e164": "+33612345678",
        "city": "Paris",
        "segment": Segment.MONTHLY100,
        "importance_score": 5,
        "closeness_score": 4,
        "notes": "Met at a conference, never followed up.",
    },
]


def generate_demo_contacts(owner_id: str, now: datetime) -> list[Contact]:
    """Build demo contacts with history relative to now.

    The first three are two days past due; the next three are 80% through
    their cadence; the last has never been contacted.
    """
    contacts: list[Contact] = []
    for index, fields in enumerate(DEMO_CONTACTS):
        contact = Contact(owner_id=owner_id, **fields)
        frequency = SEGMENT_CADENCE[contact.segment]
        contact.frequency_days = frequency
        if index < 3:
            last = now - timedelta(days=frequency + 2)
        elif index < 6:
            last = now - timedelta(days=int(frequency * 0.8))
        else:
            contacts.append(contact)
            continue
        contact.last_contacted_at = last
        contact.next_due_at = last + timedelta(days=frequency)
        contacts.append(contact)
    return contacts


def main() -> None:
    demo_dir = Path("data/demo")
    demo_dir.mkdir(parents=True, exist_ok=True)
    demo_db = demo_dir / "keepwarm_demo.db"

    db = Database(str(demo_db))
    db.initialize()

    for contact in generate_demo_contacts("demo", datetime.now(timezone.utc)):
        stored = db.create_contact(contact)
        print(f"  {stored.id}  {stored.full_name}")

    db.close()

    print(f"Demo database ready: {demo_db}")
    print(f"Try: KEEPWARM_DB_PATH={demo_db} KEEPWARM_OWNER_ID=demo python keepwarm_app.py")


if __name__ == "__main__":
    main()
