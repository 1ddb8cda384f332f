"""
Command line entry point for Talent Desk.

Commands:
  extract <file>   Print the fields guessed from a CV file as JSON
  poll             Run one inbound mail poll cycle
  init-db          Create all tables (development; use Alembic elsewhere)

Usage:
  python main.py extract cv.pdf
  python main.py poll
"""

import argparse
import json
import sys

from sqlmodel import SQLModel

from config.settings import settings
from utils.logging_config import configure_logging


def extract(path: str) -> int:
    from services.field_extraction import extract_fields
    from utils.document_extractor import DocumentExtractor

    text = DocumentExtractor.extract_from_path(path)
    fields = extract_fields(text)
    print(json.dumps(fields.model_dump(), ensure_ascii=False, indent=2))
    return 0


def poll() -> int:
    from services.mail_poller import MailboxConfig, MailPoller
    from utils.errors import MailConnectionError

    config = MailboxConfig.from_settings()
    if config is None:
        print("ERROR: IMAP_HOST, IMAP_USER and IMAP_PASSWORD must be set", file=sys.stderr)
        return 1

    try:
        counts = MailPoller(config).poll_once()
    except MailConnectionError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print("=" * 80)
    print("INBOUND MAIL")
    print("=" * 80)
    for outcome, count in sorted(counts.items()):
        print(f"{outcome}: {count}")
    return 0


def init_db() -> int:
    import models  # noqa: F401  (registers tables on SQLModel.metadata)
    from utils.database import get_engine

    if not settings.DATABASE_URL:
        print("ERROR: DATABASE_URL not set in environment/.env", file=sys.stderr)
        return 1

    SQLModel.metadata.create_all(get_engine())
    print("✅ Tables created")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Talent Desk command line tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser("extract", help="Extract candidate fields from a CV file")
    extract_parser.add_argument("file", help="Path to a .docx, .pdf or text file")
    subparsers.add_parser("poll", help="Run one inbound mail poll cycle")
    subparsers.add_parser("init-db", help="Create database tables")

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "extract":
        return extract(args.file)
    if args.command == "poll":
        return poll()
    return init_db()


if __name__ == "__main__":
    sys.exit(main())
