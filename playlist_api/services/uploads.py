"""
Audio upload handling.

Provides:
- is_allowed_audio: accept by file extension or declared MIME type
- build_stored_name: sanitized, collision-resistant filename on disk
- save_upload: copy an UploadFile into UPLOADS_DIR enforcing the size cap
- discard_upload: remove a stored file (used when the playlist append fails)

Files are never removed when their item or playlist is deleted later.
"""

from __future__ import annotations

import os
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from playlist_api.core.config import Settings
from playlist_api.core.errors import FileTooLarge, InvalidFileType, MissingFile
from playlist_api.core.logging import get_logger

logger = get_logger("uploads")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredUpload:
    """An audio file written to the uploads directory."""

    filename: str
    original_name: str
    path: Path
    size: int
    url: str


# PUBLIC_INTERFACE
def is_allowed_audio(filename: Optional[str], content_type: Optional[str], settings: Settings) -> bool:
    """True if either the filename extension or the declared MIME type is an accepted audio type."""
    name = str(filename or "").lower()
    name_ok = any(name.endswith(ext.lower()) for ext in settings.ALLOWED_AUDIO_EXTENSIONS)
    mime = str(content_type or "").split(";")[0].strip().lower()
    mime_ok = mime in {m.lower() for m in settings.ALLOWED_AUDIO_MIME_TYPES}
    return name_ok or mime_ok


# PUBLIC_INTERFACE
def build_stored_name(original_name: Optional[str], default_ext: str = ".mp3") -> str:
    """Sanitize the client filename and make it unique.

    "My Song (live).MP3" -> "My_Song_live_<epoch-ms>_<hex>.mp3"
    """
    safe = _UNSAFE_CHARS.sub("", str(original_name or "audio.mp3").replace(" ", "_"))
    base, ext = os.path.splitext(safe.lstrip("."))
    ext = (ext or default_ext).lower()
    base = base or "audio"
    return f"{base}_{int(time.time() * 1000)}_{secrets.token_hex(6)}{ext}"


# PUBLIC_INTERFACE
def save_upload(upload: Optional[UploadFile], settings: Settings) -> StoredUpload:
    """Validate and store an uploaded audio file.

    Raises:
    - MissingFile if no file was sent
    - InvalidFileType if neither name nor MIME type is accepted
    - FileTooLarge if the file exceeds MAX_UPLOAD_BYTES (the partial file is removed)
    """
    if upload is None or not upload.filename:
        raise MissingFile()
    if not is_allowed_audio(upload.filename, upload.content_type, settings):
        raise InvalidFileType()

    settings.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    default_ext = settings.ALLOWED_AUDIO_EXTENSIONS[0] if settings.ALLOWED_AUDIO_EXTENSIONS else ".mp3"
    filename = build_stored_name(upload.filename, default_ext)
    target = settings.UPLOADS_DIR / filename

    size = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = upload.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.MAX_UPLOAD_BYTES:
                    raise FileTooLarge()
                out.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise

    url = f"{settings.UPLOADS_URL_PATH.rstrip('/')}/{filename}"
    logger.info("Audio file stored", extra={"stored_as": filename, "bytes": size})
    return StoredUpload(filename=filename, original_name=upload.filename, path=target, size=size, url=url)


# PUBLIC_INTERFACE
def discard_upload(stored: StoredUpload) -> None:
    stored.path.unlink(missing_ok=True)
    logger.info("Audio file discarded", extra={"stored_as": stored.filename})
