from __future__ import annotations

import uuid


def new_id() -> str:
    """Globally unique opaque id for new rows/objects."""
    return str(uuid.uuid4())
