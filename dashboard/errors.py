"""Error taxonomy shared by the data client, page controllers and views."""
from __future__ import annotations


class BackendError(Exception):
    """Base class for failures that are shown to the admin as a banner."""

    default_message = "Something went wrong while talking to the backend."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthError(BackendError):
    default_message = "Not authenticated. Please log in again."


class AccessDeniedError(BackendError):
    default_message = "Access denied. Please check Row Level Security (RLS) policies in Supabase."


class NotFoundError(BackendError):
    default_message = "Record not found. It may have been deleted."


class WriteError(BackendError):
    default_message = "Failed to save the record."


class DuplicateError(WriteError):
    default_message = "A record with this information already exists."


class InvalidReferenceError(WriteError):
    default_message = "Invalid reference. Please check related data."


class MissingFieldError(WriteError):
    default_message = "Required field is missing. Please fill in all required fields."


class InvalidValueError(WriteError):
    default_message = "Invalid value provided. Please check your input (e.g., status, format, category)."


class RelayError(BackendError):
    default_message = "Failed to send webhook request"


__all__ = [
    "AccessDeniedError",
    "AuthError",
    "BackendError",
    "DuplicateError",
    "InvalidReferenceError",
    "InvalidValueError",
    "MissingFieldError",
    "NotFoundError",
    "RelayError",
    "WriteError",
]
