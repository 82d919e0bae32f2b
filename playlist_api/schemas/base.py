"""
Shared Pydantic base for payloads exchanged with the browser client.

Python attributes are snake_case; JSON keys are camelCase (firstName, videoId, ...).
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    def to_json(self) -> dict:
        """Dump with camelCase keys, as stored on disk and sent to clients."""
        return self.model_dump(by_alias=True, mode="json")


# PUBLIC_INTERFACE
def scalar_to_text(value: Any) -> Any:
    """Turn numbers and booleans into strings, the way the browser client's values are read.

    None and non-scalar values are returned unchanged.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


# PUBLIC_INTERFACE
def stored_timestamp(value: Any) -> int:
    """Epoch milliseconds from a stored value; anything unreadable becomes 0."""
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if math.isfinite(number) else 0
