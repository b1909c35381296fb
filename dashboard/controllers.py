"""Drives one entity page through load, save, delete and highlight actions."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable

import httpx
from django.conf import settings
from postgrest.exceptions import APIError

from . import schema, services
from .errors import BackendError
from .forms import RecordForm
from .pages import EntityPage
from .state import (
    ConfirmingDelete,
    Failed,
    Loaded,
    Loading,
    Mutating,
    PageState,
    PageStateMachine,
    Succeeded,
)
from .tables import ReadOnlyCollection

logger = logging.getLogger(__name__)

# rejected by the backend, unreachable, or an unreadable response
BACKEND_FAILURES = (BackendError, APIError, httpx.HTTPError, json.JSONDecodeError)


def error_message(exc: Exception) -> str:
    """User-facing text of a backend failure."""

    if isinstance(exc, BackendError):
        return exc.message
    if isinstance(exc, APIError):
        return exc.message or str(exc)
    if isinstance(exc, httpx.HTTPError):
        return f"Could not reach the backend: {str(exc) or type(exc).__name__}"
    return str(exc) or "An unexpected error occurred."


class PageController:
    def __init__(
        self,
        page: EntityPage,
        collection: ReadOnlyCollection,
        machine: PageStateMachine | None = None,
    ) -> None:
        self.page = page
        self.collection = collection
        self.machine = machine or PageStateMachine()

    @property
    def state(self) -> PageState:
        return self.machine.state

    @property
    def records(self) -> tuple[dict[str, Any], ...]:
        return self.machine.records

    def _fetch(self) -> tuple[dict[str, Any], ...]:
        return tuple(schema.normalize_all(self.page.entity, self.collection.fetch()))

    def load(self) -> PageState:
        if not isinstance(self.state, Loading):
            if isinstance(self.state, Succeeded):
                self.machine.move(Loaded(self.records))
            self.machine.move(Loading())
        try:
            records = self._fetch()
        except BACKEND_FAILURES as exc:
            logger.warning("Loading %s failed: %s", self.page.table, error_message(exc))
            return self.machine.move(Failed((), error_message(exc)))
        return self.machine.move(Loaded(records))

    def _mutate(
        self, action: str, call: Callable[[], Any], message: str, clear_after_ms: int | None = None
    ) -> PageState:
        """Run a write, then re-fetch the whole list on success."""

        self.machine.move(Mutating(self.records, action))
        try:
            call()
        except BACKEND_FAILURES as exc:
            logger.warning("%s on %s failed: %s", action, self.page.table, error_message(exc))
            return self.machine.move(Failed(self.records, error_message(exc)))
        try:
            records = self._fetch()
        except BACKEND_FAILURES as exc:
            # the write went through; only the refreshed list is missing
            logger.warning("Reloading %s after %s failed: %s", self.page.table, action, error_message(exc))
            return self.machine.move(Failed(self.records, error_message(exc), committed=True))
        if clear_after_ms is None:
            clear_after_ms = settings.DASHBOARD_SUCCESS_CLEAR_MS
        return self.machine.move(Succeeded(records, message, clear_after_ms))

    def save(self, form: RecordForm, record_id: Any = None) -> PageState:
        """Create or update from a bound form; an invalid form leaves the state alone."""

        if not form.is_valid():
            return self.state
        payload = form.to_payload()
        if record_id is None:
            return self._mutate("create", lambda: self.collection.create(payload), self.page.message("created"))
        return self._mutate(
            "update", lambda: self.collection.update(record_id, payload), self.page.message("updated")
        )

    def request_delete(self, record: dict[str, Any]) -> PageState:
        return self.machine.move(ConfirmingDelete(self.records, record))

    def delete(self, record: dict[str, Any], confirmed: bool) -> PageState:
        if not isinstance(self.state, ConfirmingDelete):
            self.request_delete(record)
        if not confirmed:
            return self.machine.move(Loaded(self.records))
        return self._mutate(
            "delete", lambda: self.collection.delete(record["id"]), self.page.message("deleted")
        )

    def toggle_highlight(self, record: dict[str, Any]) -> PageState:
        highlighted = not bool(record.get("is_highlight"))
        verb = "highlighted" if highlighted else "unhighlighted"
        return self._mutate(
            "highlight",
            lambda: self.collection.update(record["id"], {"is_highlight": highlighted}),
            f"{schema.display_title(record)} {verb}.",
        )

    def filtered(self, query: str | None = None) -> list[dict[str, Any]]:
        return services.filter_records(self.records, query, self.page.search_fields)

    def grouped(self, query: str | None = None) -> list[services.DayGroup]:
        return services.group_by_day(self.filtered(query))

    def find(self, record_id: Any) -> dict[str, Any] | None:
        wanted = str(record_id)
        for record in self.records:
            if str(record.get("id")) == wanted:
                return record
        return None


__all__ = ["PageController", "error_message"]
