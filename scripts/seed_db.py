from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.feeltime.feeltime.common.datetime_utils import parse_iso_date
from src.feeltime.feeltime.seeding import seed_employee_history
from src.feeltime.feeltime.storage.factory import StorageSettings, create_store


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed clock events for one employee")
    parser.add_argument("--employee", "-e", default="E12345")
    parser.add_argument("--days", "-d", type=int, default=60)
    parser.add_argument("--reset", action="store_true", help="Wipe every backend object first")
    parser.add_argument("--start", "-s", type=parse_iso_date, default=None, help="Last seeded day (YYYY-MM-DD)")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    store = create_store(StorageSettings.from_settings(settings))

    if args.reset:
        store.reset_all()

    result = seed_employee_history(store, employee_id=args.employee, days=args.days, start=args.start)
    print(f"OK: Seeded {result.events} events for employee {args.employee} over {args.days} days.")


if __name__ == "__main__":
    main()
