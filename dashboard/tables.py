"""Named collections over the data client, one per entity table."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .backend import Record, SupabaseBackend

logger = logging.getLogger(__name__)

EVENTS = "events"
HACKATHONS = "hackathons"
SCHOLARSHIPS = "scholarships"
STUDENT_CLUBS = "student_clubs"
SIGNUPS = "signups"

ALL_TABLES = (EVENTS, HACKATHONS, SCHOLARSHIPS, STUDENT_CLUBS, SIGNUPS)
CALENDAR_TABLES = (EVENTS, HACKATHONS, SCHOLARSHIPS)


class ReadOnlyCollection:
    """A table that can be listed, counted and pruned but not edited."""

    def __init__(self, backend: SupabaseBackend, table: str) -> None:
        self.backend = backend
        self.table = table

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.table}>"

    def fetch(self) -> list[Record]:
        return self.backend.fetch_all(self.table)

    def delete(self, record_id: Any) -> None:
        self.backend.delete(self.table, record_id)

    def count(self) -> int:
        return self.backend.count(self.table)


class Collection(ReadOnlyCollection):
    """A fully editable table."""

    def create(self, record: Record) -> Record:
        return self.backend.create(self.table, record)

    def update(self, record_id: Any, changes: Record) -> Record:
        return self.backend.update(self.table, record_id, changes)


def for_backend(backend: SupabaseBackend) -> dict[str, ReadOnlyCollection]:
    return {
        EVENTS: Collection(backend, EVENTS),
        HACKATHONS: Collection(backend, HACKATHONS),
        SCHOLARSHIPS: Collection(backend, SCHOLARSHIPS),
        STUDENT_CLUBS: Collection(backend, STUDENT_CLUBS),
        SIGNUPS: ReadOnlyCollection(backend, SIGNUPS),
    }


def dashboard_counts(backend: SupabaseBackend, tables: tuple[str, ...] = ALL_TABLES) -> dict[str, int]:
    """Count every table in parallel; each count already degrades to 0 on failure."""

    collections = for_backend(backend)
    with ThreadPoolExecutor(max_workers=max(1, len(tables))) as ex:
        futures = {table: ex.submit(collections[table].count) for table in tables}
        return {table: future.result() for table, future in futures.items()}


def calendar_records(
    backend: SupabaseBackend, tables: tuple[str, ...] = CALENDAR_TABLES
) -> dict[str, list[Record]]:
    """Fetch the calendar sources in parallel; a failing source contributes nothing."""

    results: dict[str, list[Record]] = {}
    with ThreadPoolExecutor(max_workers=max(1, len(tables))) as ex:
        futures = {table: ex.submit(backend.fetch_all, table) for table in tables}
        for table, future in futures.items():
            try:
                results[table] = future.result()
            except Exception as exc:
                logger.warning("Error loading calendar data from %s: %s", table, exc)
                results[table] = []
    return results


__all__ = [
    "ALL_TABLES",
    "CALENDAR_TABLES",
    "Collection",
    "EVENTS",
    "HACKATHONS",
    "ReadOnlyCollection",
    "SCHOLARSHIPS",
    "SIGNUPS",
    "STUDENT_CLUBS",
    "calendar_records",
    "dashboard_counts",
    "for_backend",
]
