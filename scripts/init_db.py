from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.feeltime.feeltime.storage.factory import StorageSettings, create_store, resolve_backend


def main() -> None:
    load_dotenv(override=False)
    settings_module = get_settings_module()
    storage_settings = StorageSettings.from_settings(importlib.import_module(settings_module))

    # Building the store applies the schema (or creates the index objects).
    store = create_store(storage_settings)
    store.health()
    print(f"OK: {resolve_backend(storage_settings).value} store ready (settings={settings_module})")


if __name__ == "__main__":
    main()
