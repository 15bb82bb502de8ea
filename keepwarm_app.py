#!/usr/bin/env python3
"""KeepWarm - stay in touch with the people who matter.

Single entry point for the application.

Usage:
    python keepwarm_app.py                         # Show today's queue
    python keepwarm_app.py --search "growth"       # Find contacts
    python keepwarm_app.py --suggest ID --energy high --language fr
    python keepwarm_app.py --mark-sent ID --message "Hey Sam!"
    python keepwarm_app.py --snooze ID
    python keepwarm_app.py --skip ID
    python keepwarm_app.py --link ID --message "Hey Sam!"
    python keepwarm_app.py --status                # Config readiness
    python keepwarm_app.py --version
"""

import argparse
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

from keepwarm import __version__
from keepwarm.core.config import get_config, validate_config
from keepwarm.core.exceptions import KeepWarmError
from keepwarm.core.logging import get_logger, setup_logging
from keepwarm.db.database import Database
from keepwarm.engine.cadence import days_overdue, is_overdue
from keepwarm.engine.queue import TodayQueue, build_today


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="KeepWarm - relationship cadence and outreach drafts"
    )
    action = parser.add_mutually_exclusive_group()
    action.add_argument("--today", action="store_true", help="Show today's queue (default)")
    action.add_argument("--search", metavar="TERM", help="Find contacts by name, company or role")
    action.add_argument("--suggest", metavar="ID", help="Draft three messages for a contact")
    action.add_argument("--mark-sent", metavar="ID", help="Record a sent message")
    action.add_argument("--snooze", metavar="ID", help="Defer a contact by one day")
    action.add_argument("--skip", metavar="ID", help="Defer a contact by a full cadence")
    action.add_argument("--link", metavar="ID", help="Print a WhatsApp link for a message")
    action.add_argument("--status", action="store_true", help="Show configuration readiness")
    action.add_argument("--version", action="store_true", help="Show version and exit")

    parser.add_argument("--energy", default="medium", choices=["low", "medium", "high"])
    parser.add_argument("--language", default="en", choices=["en", "fr"])
    parser.add_argument("--message", default="", help="Message text for --mark-sent/--link")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def _print_queue(queue: TodayQueue) -> None:
    now = queue.generated_at or datetime.now(timezone.utc)
    print(f"\nToday's Connections - {now.strftime('%A, %B %d, %Y')}\n")
    print(
        f"Due: {queue.due_count}  Overdue: {queue.overdue_count}  "
        f"Capacity: {queue.due_count}/{queue.daily_capacity}"
    )
    print(
        "Segments: "
        + ", ".join(f"{segment.value} {count}" for segment, count in queue.segment_counts.items())
    )
    if not queue.contacts:
        print("\nAll caught up! No contacts due today.")
        return

    print()
    for contact in queue.contacts:
        flag = ""
        if is_overdue(contact, now):
            flag = f"  OVERDUE {days_overdue(contact, now)}d"
        last = (
            contact.last_contacted_at.strftime("%Y-%m-%d") if contact.last_contacted_at else "never"
        )
        print(
            f"  [{contact.segment.value:<10}] {contact.display_name:<20} "
            f"importance {contact.importance_score:>2}  last {last}{flag}  ({contact.id})"
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for KeepWarm.

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    args = _build_parser().parse_args(argv)

    if args.version:
        print(f"KeepWarm v{__version__}")
        return 0

    config = get_config()
    setup_logging(log_dir=config.log_path, debug=args.debug or config.debug)
    logger = get_logger("main")

    issues = validate_config(config)
    for issue in issues:
        if issue.startswith("CRITICAL:"):
            logger.error(f"Configuration: {issue}")
        else:
            logger.warning(f"Configuration issue: {issue}")

    if args.status:
        print(f"\nKeepWarm v{__version__} - Readiness\n")
        print(f"  Database:        {config.db_path}")
        print(f"  Owner:           {config.owner_id}")
        print(f"  Claude drafting: {'enabled' if config.claude_api_key else 'templates only'}")
        if issues:
            print(f"\nConfiguration issues ({len(issues)}):")
            for issue in issues:
                print(f"  ! {issue}")
        print()
        return 0

    db = Database(str(config.db_path), config.default_country_code)
    try:
        db.initialize()
        return _run(args, db, config.owner_id)
    except KeepWarmError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


def _run(args: argparse.Namespace, db: Database, owner_id: str) -> int:
    if args.search is not None:
        matches = db.search_contacts(owner_id, args.search)
        if not matches:
            print(f"No contacts match {args.search!r}")
            return 0
        for contact in matches:
            detail = ", ".join(part for part in (contact.role, contact.company) if part)
            print(f"  {contact.display_name:<20} {detail:<30} ({contact.id})")
        return 0

    if args.suggest:
        from keepwarm.engine.suggestions import MessageSuggestionEngine

        contact = db.get_contact(args.suggest)
        drafts = MessageSuggestionEngine().suggest(contact, args.energy, args.language)
        print(f"\nSuggestions for {contact.display_name} ({args.energy}, {args.language}):\n")
        for i, draft in enumerate(drafts, 1):
            print(f"  {i}. [{draft.tone.value}] {draft.text}")
        return 0

    if args.mark_sent:
        from keepwarm.engine.transitions import mark_sent

        contact = mark_sent(db, args.mark_sent, message=args.message)
        print(
            f"Marked sent. Next contact with {contact.display_name}: "
            f"{contact.next_due_at:%Y-%m-%d}"
        )
        return 0

    if args.snooze:
        from keepwarm.engine.transitions import snooze

        contact = snooze(db, args.snooze)
        print(f"Snoozed {contact.display_name} until {contact.next_due_at:%Y-%m-%d %H:%M} UTC")
        return 0

    if args.skip:
        from keepwarm.engine.transitions import skip

        contact = skip(db, args.skip)
        print(f"Skipped {contact.display_name}. Next due {contact.next_due_at:%Y-%m-%d}")
        return 0

    if args.link:
        from keepwarm.integrations.whatsapp import create_whatsapp_link

        contact = db.get_contact(args.link)
        if not contact.phone_e164:
            print(f"No phone number for {contact.display_name}", file=sys.stderr)
            return 1
        print(create_whatsapp_link(contact.phone_e164, args.message))
        return 0

    _print_queue(build_today(db, owner_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
