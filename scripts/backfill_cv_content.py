"""Cache CV text for candidates whose CV file was stored without extracted text.

Candidates uploaded before CV text was cached at ingest (or whose extraction
timed out) are only searchable through on-demand extraction. This script
extracts their text once so they also appear in full-text search.

Usage:
  python scripts/backfill_cv_content.py
  python scripts/backfill_cv_content.py --batch-size 500
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import argparse

from config.settings import settings
from services.candidate_service import CandidateService
from utils.database import session_factory
from utils.logging_config import configure_logging


def backfill(batch_size: int) -> int:
    with session_factory() as session:
        return CandidateService(session).backfill_cv_content(batch_size=batch_size)


def main() -> int:
    parser = argparse.ArgumentParser(description="Cache extracted CV text for candidates missing it")
    parser.add_argument("--batch-size", type=int, default=100, help="Maximum candidates to process")
    args = parser.parse_args()

    if not settings.DATABASE_URL:
        print("ERROR: DATABASE_URL not set in environment/.env", file=sys.stderr)
        return 1

    configure_logging()
    filled = backfill(args.batch_size)
    print(f"✅ Cached CV text for {filled} candidates")
    return 0


if __name__ == "__main__":
    sys.exit(main())
