"""Thin CRUD client over the Supabase tables backing the dashboard."""
from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.http import HttpRequest
from django.utils import timezone
from postgrest.exceptions import APIError
from supabase import Client, create_client

from .errors import (
    AccessDeniedError,
    AuthError,
    DuplicateError,
    InvalidReferenceError,
    InvalidValueError,
    MissingFieldError,
    NotFoundError,
    WriteError,
)

logger = logging.getLogger(__name__)

SESSION_ACCESS_TOKEN_KEY = "dashboard.supabase.access-token"
SESSION_REFRESH_TOKEN_KEY = "dashboard.supabase.refresh-token"
SESSION_EMAIL_KEY = "dashboard.supabase.email"

# PostgREST / Postgres error codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"
UNDEFINED_COLUMN = "42703"
JWT_DENIED = "PGRST301"
NO_ROWS = "PGRST116"

Record = dict[str, Any]


def _error_text(exc: APIError) -> str:
    return (getattr(exc, "message", None) or str(exc) or "").strip()


def _is_access_denied(exc: APIError) -> bool:
    message = _error_text(exc).lower()
    return exc.code == JWT_DENIED or "permission denied" in message or "policy" in message


def _is_missing_updated_at(exc: APIError) -> bool:
    return exc.code == UNDEFINED_COLUMN or "updated_at" in _error_text(exc)


def _translate_write_error(exc: APIError, fallback: str) -> WriteError | AccessDeniedError:
    """Map a backend constraint violation onto the dashboard error taxonomy."""

    message = _error_text(exc)
    if exc.code == UNIQUE_VIOLATION:
        return DuplicateError()
    if exc.code == FOREIGN_KEY_VIOLATION:
        return InvalidReferenceError()
    if exc.code == NOT_NULL_VIOLATION:
        return MissingFieldError()
    if _is_access_denied(exc):
        return AccessDeniedError()
    if exc.code == CHECK_VIOLATION or "violates check constraint" in message:
        return InvalidValueError()
    return WriteError(message or fallback)


class SupabaseBackend:
    """Uniform fetch/create/update/delete/count contract over named tables."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def _require_session(self) -> None:
        if not self.client.auth.get_session():
            raise AuthError()

    def fetch_all(self, table: str) -> list[Record]:
        """Return every row of ``table``, newest first."""

        self._require_session()
        try:
            response = self.client.table(table).select("*").order("created_at", desc=True).execute()
        except APIError as exc:
            logger.error("Error fetching %s: %s", table, _error_text(exc))
            if _is_access_denied(exc):
                raise AccessDeniedError(
                    f"Access denied to {table}. Please check Row Level Security (RLS) policies in "
                    "Supabase. The authenticated user needs SELECT permission."
                ) from exc
            raise
        return list(response.data or [])

    def create(self, table: str, record: Record) -> Record:
        self._require_session()
        try:
            response = self.client.table(table).insert(record).execute()
        except APIError as exc:
            logger.error("Error creating record in %s: %s", table, _error_text(exc))
            raise _translate_write_error(exc, f"Failed to create record in {table}") from exc
        rows = response.data or []
        created = rows[0] if rows else dict(record)
        logger.info("Created record %s in %s", created.get("id"), table)
        return created

    def update(self, table: str, record_id: Any, changes: Record) -> Record:
        """Merge ``changes`` into a row, stamping ``updated_at`` when the table has it."""

        self._require_session()
        stamped = {**changes, "updated_at": timezone.now().isoformat()}
        try:
            try:
                response = self._update(table, record_id, stamped)
            except APIError as exc:
                if not _is_missing_updated_at(exc):
                    raise
                logger.info("%s has no updated_at column, retrying without it", table)
                response = self._update(table, record_id, dict(changes))
        except APIError as exc:
            logger.error("Error updating record %s in %s: %s", record_id, table, _error_text(exc))
            if exc.code == NO_ROWS:
                raise NotFoundError() from exc
            raise _translate_write_error(exc, f"Failed to update record in {table}") from exc

        rows = response.data or []
        if not rows:
            raise NotFoundError()
        logger.info("Updated record %s in %s", record_id, table)
        return rows[0]

    def _update(self, table: str, record_id: Any, payload: Record):
        return self.client.table(table).update(payload).eq("id", record_id).execute()

    def delete(self, table: str, record_id: Any) -> None:
        self._require_session()
        self.client.table(table).delete().eq("id", record_id).execute()
        logger.info("Deleted record %s from %s", record_id, table)

    def count(self, table: str) -> int:
        """Row count for dashboard tiles; degrades to 0 instead of failing."""

        if not self.client.auth.get_session():
            logger.warning("No session for %s count", table)
            return 0
        try:
            response = self.client.table(table).select("*", count="exact", head=True).execute()
        except APIError as exc:
            logger.error("Error counting %s: %s", table, _error_text(exc))
            return 0
        except Exception as exc:
            logger.error("Error counting %s: %s", table, exc)
            return 0
        return response.count or 0


def create_supabase_client() -> Client:
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError("Missing Supabase credentials. Set SUPABASE_URL and SUPABASE_KEY.")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def get_backend(request: HttpRequest) -> SupabaseBackend:
    """Build a backend bound to the Supabase session stored in the Django session."""

    client = create_supabase_client()
    access_token = request.session.get(SESSION_ACCESS_TOKEN_KEY)
    refresh_token = request.session.get(SESSION_REFRESH_TOKEN_KEY)
    if access_token and refresh_token:
        try:
            response = client.auth.set_session(access_token, refresh_token)
        except Exception as exc:
            logger.warning("Could not restore Supabase session: %s", exc)
            clear_session(request)
        else:
            session = getattr(response, "session", None)
            if session is not None and session.access_token != access_token:
                remember_session(request, session, request.session.get(SESSION_EMAIL_KEY, ""))
    return SupabaseBackend(client)


def sign_in(request: HttpRequest, email: str, password: str) -> str:
    """Sign in with email/password and remember the tokens; returns the user's email."""

    client = create_supabase_client()
    try:
        response = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as exc:
        logger.warning("Sign-in failed for %s: %s", email, exc)
        raise AuthError("Invalid email or password.") from exc
    if response.session is None:
        raise AuthError("Invalid email or password.")
    user_email = (getattr(response.user, "email", None) or email).lower()
    remember_session(request, response.session, user_email)
    logger.info("Signed in %s", user_email)
    return user_email


def sign_out(request: HttpRequest) -> None:
    if request.session.get(SESSION_ACCESS_TOKEN_KEY):
        try:
            get_backend(request).client.auth.sign_out()
        except Exception as exc:
            logger.warning("Supabase sign-out failed: %s", exc)
    clear_session(request)


def remember_session(request: HttpRequest, session, email: str) -> None:
    request.session[SESSION_ACCESS_TOKEN_KEY] = session.access_token
    request.session[SESSION_REFRESH_TOKEN_KEY] = session.refresh_token
    request.session[SESSION_EMAIL_KEY] = email
    request.session.modified = True


def clear_session(request: HttpRequest) -> None:
    for key in (SESSION_ACCESS_TOKEN_KEY, SESSION_REFRESH_TOKEN_KEY, SESSION_EMAIL_KEY):
        request.session.pop(key, None)
    request.session.modified = True


__all__ = [
    "SupabaseBackend",
    "clear_session",
    "create_supabase_client",
    "get_backend",
    "remember_session",
    "sign_in",
    "sign_out",
]
