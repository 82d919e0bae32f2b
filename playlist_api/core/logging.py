"""
Structured logging utilities for the Playlist API with correlation IDs.

Provides:
- get_logger: JSON-like structured logger
- configure_logging: (re)apply the root handler and level from settings
- correlation ID management for per-request tracing via contextvars
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from playlist_api.core.config import Settings, get_settings

# Context variable to hold correlation ID per request
_cid_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Logging Formatter to output JSON structured logs."""

    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": self.service,
            "environment": self.environment,
        }

        cid = get_correlation_id()
        if cid:
            base["correlation_id"] = cid

        # Include extra fields passed via logger extra
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in base:
                base[key] = value

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False, default=str)


# PUBLIC_INTERFACE
def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install the JSON handler on the root logger."""
    settings = settings or get_settings()
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter(settings.SERVICE_NAME, settings.ENVIRONMENT))
    root.handlers = [handler]
    setattr(root, "_playlist_api_configured", True)


# PUBLIC_INTERFACE
def get_logger(name: str = "playlist_api") -> logging.Logger:
    """Get a structured logger configured for the Playlist API."""
    if not getattr(logging.getLogger(), "_playlist_api_configured", False):
        configure_logging()
    return logging.getLogger(name)


# PUBLIC_INTERFACE
def set_correlation_id(correlation_id: Optional[str]) -> str:
    """Set the current correlation ID in context, generating one if missing.

    Returns the correlation id that is set.
    """
    if not correlation_id:
        correlation_id = str(uuid.uuid4())
    _cid_ctx.set(correlation_id)
    return correlation_id


# PUBLIC_INTERFACE
def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context if set."""
    return _cid_ctx.get()


# PUBLIC_INTERFACE
def clear_correlation_id() -> None:
    """Clear correlation ID from context (set to None)."""
    _cid_ctx.set(None)
