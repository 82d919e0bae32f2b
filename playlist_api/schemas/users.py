"""
Pydantic schemas for registration, login and the session profile.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from playlist_api.schemas.base import ApiModel, scalar_to_text, stored_timestamp


class UserCreate(ApiModel):
    # Optional so that missing fields surface as missing_fields rather than a 422
    username: Optional[str] = Field(None, description="Unique username (case-insensitive)")
    password: Optional[str] = Field(None, description="Plain password for registration")
    first_name: Optional[str] = Field(None, description="Display first name")
    image_url: Optional[str] = Field(None, description="Avatar image URL")

    @field_validator("username", "password", "first_name", "image_url", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        return scalar_to_text(value)


class UserLogin(ApiModel):
    username: Optional[str] = Field(None, description="Username")
    password: Optional[str] = Field(None, description="User password")

    @field_validator("username", "password", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        return scalar_to_text(value)


class UserRecord(ApiModel):
    """A persisted user.

    Older records kept the password in plain text under "password"; newer ones
    carry only "passwordHash".
    """

    username: str = ""
    password_hash: Optional[str] = None
    password: Optional[str] = None
    first_name: str = ""
    image_url: str = ""
    created_at: int = 0

    @field_validator("password", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        return scalar_to_text(value)

    @field_validator("username", "first_name", "image_url", mode="before")
    @classmethod
    def _text_or_blank(cls, value: Any) -> Any:
        return "" if value is None else scalar_to_text(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _timestamp(cls, value: Any) -> int:
        return stored_timestamp(value)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class SessionUser(ApiModel):
    """Identity held by the session: what the client sees as the logged-in user."""

    username: str
    first_name: str = ""
    image_url: str = ""

    @classmethod
    def from_record(cls, user: UserRecord) -> "SessionUser":
        return cls(username=user.username, first_name=user.first_name, image_url=user.image_url)
