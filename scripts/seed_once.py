from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.feeltime.feeltime.seeding import seed_initial
from src.feeltime.feeltime.storage.factory import StorageSettings, create_store


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    store = create_store(StorageSettings.from_settings(settings))

    result = seed_initial(store)
    if not result.departments:
        print("Database already has departments; skipping initial seeding.")
        return
    print(
        f"OK: Seeded {result.events} events for {result.employees} employees "
        f"in {result.departments} departments."
    )


if __name__ == "__main__":
    main()
