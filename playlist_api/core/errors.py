"""
Request-scoped error types for the Playlist API.

Every failure a route can report is an ApiError carrying an HTTP status and a
stable error code. The application renders them as {"error": <code>}.
"""

from __future__ import annotations

from fastapi import status


class ApiError(Exception):
    """Base class for errors surfaced to clients as {"error": code}."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "bad_request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class MissingFields(ApiError):
    code = "missing_fields"


class DuplicateUsername(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "username_exists"


class InvalidCredentials(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_credentials"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class MissingName(ApiError):
    code = "missing_name"


class DuplicateName(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "playlist_name_exists"


class PlaylistNotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "playlist_not_found"


class ItemNotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "item_not_found"


class DuplicateItem(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_exists"


class InvalidRating(ApiError):
    code = "invalid_rating"


class MissingFile(ApiError):
    code = "missing_file"


class InvalidFileType(ApiError):
    code = "invalid_file_type"


class FileTooLarge(ApiError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "file_too_large"


class SearchUnavailable(ApiError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "search_unavailable"
