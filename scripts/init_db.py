"""Create the staff attendance tables; ``--seed`` also loads the demo schools and instructors.

Usage: APP_ENV=development python scripts/init_db.py [--seed]
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.staff_attendance.staff_attendance.database.bootstrap import SEED_PATH, bootstrap_database
from src.staff_attendance.staff_attendance.main import configure_logging


def main(argv: list[str]) -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    seed = "--seed" in argv
    tables = bootstrap_database(dict(settings.DB_CONFIG), seed_path=SEED_PATH if seed else None)
    print(f"staff_attendance: {len(tables)} table(s) ready{' with demo data' if seed else ''}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
