"""File I/O operations for rendering."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Replace ``path`` with ``text`` via a temporary file in the same directory.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    ensure_parent(path)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def copy_stub(stub_path: Path, output_path: Path) -> Path:
    """Copy a static stub over ``output_path`` without rendering it."""
    if not stub_path.exists():
        raise FileNotFoundError(f"Stub not found: {stub_path}")
    ensure_parent(output_path)
    shutil.copyfile(stub_path, output_path)
    return output_path
