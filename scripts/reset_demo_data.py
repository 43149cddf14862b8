#!/usr/bin/env python3
"""Reset WorkSpace Hub to the demo seed.

Usage:
    python scripts/reset_demo_data.py

Rewrites the demo users and workspaces, closes every session and clears
every workspace file list. Exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal, init_db
from app.services.hub_store import HubStore
from app.services.kv_store import SqlKeyValueStore


def main() -> int:
    init_db()
    db = SessionLocal()
    try:
        hub = HubStore(SqlKeyValueStore(db))
        hub.reset()
        print(
            f"status=completed users={len(hub.users.all())} "
            f"workspaces={len(hub.workspaces.all())}"
        )
        return 0
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
