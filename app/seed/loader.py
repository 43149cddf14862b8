"""Demo seed loader.

Reads the demo roster, workspace definitions and activity log from YAML.
The path comes from ``Settings.seed_path`` so deployments can ship their
own roster.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from app.config import get_settings


@lru_cache(maxsize=1)
def load_seed() -> dict[str, Any]:
    """Load and validate the demo seed YAML content.

    Raises:
        FileNotFoundError: If the seed file is missing.
        SeedValidationError: If the seed is structurally invalid.
    """
    from app.seed.validator import validate_seed

    path = Path(get_settings().seed_path)
    try:
        with path.open() as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Demo seed YAML is malformed: {exc}") from exc
    validate_seed(data)
    return data


def get_seed_passwords() -> dict[str, str]:
    """Return the build-time username -> plaintext password table."""
    return {u["username"]: u["password"] for u in load_seed()["users"]}
