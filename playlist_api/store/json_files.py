"""
JSON document helpers for the file-backed store.

Provides:
- read_json_safe: load a document, falling back to a default on any problem
- write_json_atomic: replace a document via temp file + rename
- file_lock: one re-entrant lock per document path, shared by every store in the process
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict

from playlist_api.core.logging import get_logger

logger = get_logger("store.json")

_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


# PUBLIC_INTERFACE
def file_lock(path: Path) -> threading.RLock:
    """Return the process-wide lock serializing read-modify-write on path."""
    key = str(Path(path).resolve())
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


# PUBLIC_INTERFACE
def read_json_safe(path: Path, fallback: Callable[[], Any], expected_type: type) -> Any:
    """Read a JSON document, returning fallback() if it is missing, empty, malformed or of the wrong shape."""
    if not path.exists():
        return fallback()
    try:
        raw = path.read_text(encoding="utf-8")
        if not raw.strip():
            return fallback()
        data = json.loads(raw)
    except (OSError, ValueError) as exc:
        logger.warning("Unreadable JSON document, using empty default", extra={"path": str(path), "error": str(exc)})
        return fallback()
    if not isinstance(data, expected_type):
        logger.warning(
            "Unexpected JSON document shape, using empty default",
            extra={"path": str(path), "found": type(data).__name__},
        )
        return fallback()
    return data


# PUBLIC_INTERFACE
def write_json_atomic(path: Path, data: Any) -> None:
    """Write data as indented JSON; readers never observe a half-written file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        # Remove the temp file, then let the original error propagate
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
