"""Demo seed package: roster, workspaces and activity log."""

from __future__ import annotations

from app.seed.loader import get_seed_passwords, load_seed

__all__ = ["get_seed_passwords", "load_seed"]
