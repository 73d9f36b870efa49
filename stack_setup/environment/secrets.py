"""Lookup of secrets that must survive re-rendering."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

APP_KEY = "APP_KEY"


def read_secret(path: Path, key: str = APP_KEY) -> str | None:
    """Return the value of the first ``KEY=`` line in an existing file.

    Args:
        path: Target file that may or may not exist
        key: Variable name to look up

    Returns:
        The value after the first ``=``, or None when the file or line is
        missing or the value is empty
    """
    if not path.exists():
        return None

    prefix = f"{key}="
    with path.open(encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            if line.startswith(prefix):
                value = line[len(prefix) :]
                if value:
                    logger.debug(f"Preserving {key} from {path}")
                return value or None

    return None
