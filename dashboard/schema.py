"""Canonical record shapes and the adapter for legacy field names.

Rows written by older versions of the dashboard used ``name``/``organisers``/
``link`` and capitalised formats for events and hackathons. Every record read
from the backend goes through :func:`normalize` so templates, search and
forms only ever deal with the canonical keys.
"""
from __future__ import annotations

from typing import Any

from .choices import EventFormat

EVENT = "event"
HACKATHON = "hackathon"
SCHOLARSHIP = "scholarship"
STUDENT_CLUB = "student_club"
SIGNUP = "signup"

EVENT_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "short_description",
    "description",
    "start_date",
    "start_time",
    "end_date",
    "end_time",
    "duration",
    "location",
    "format",
    "status",
    "category",
    "registration_url",
    "registration_deadline",
    "capacity",
    "organizer_name",
    "organizer_contactinfo",
    "requirements",
    "posted_linkedin",
    "posted_whatsapp",
    "posted_newsletter",
    "is_highlight",
    "created_at",
    "updated_at",
)

HACKATHON_FIELDS: tuple[str, ...] = EVENT_FIELDS + ("prizes", "signup_deadline")

SCHOLARSHIP_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "short_description",
    "description",
    "start_date",
    "end_date",
    "award_amount",
    "award_currency",
    "application_url",
    "organizer_name",
    "organizer_contactinfo",
    "status",
    "category",
    "image_url",
    "location",
    "created_at",
)

STUDENT_CLUB_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "description",
    "link",
    "universities",
    "topics",
    "created_at",
)

CANONICAL_FIELDS: dict[str, tuple[str, ...]] = {
    EVENT: EVENT_FIELDS,
    HACKATHON: HACKATHON_FIELDS,
    SCHOLARSHIP: SCHOLARSHIP_FIELDS,
    STUDENT_CLUB: STUDENT_CLUB_FIELDS,
}

# legacy key -> canonical key
LEGACY_ALIASES: dict[str, dict[str, str]] = {
    EVENT: {"name": "title", "organisers": "organizer_name", "link": "registration_url"},
    HACKATHON: {"name": "title", "organisers": "organizer_name", "link": "registration_url"},
    SCHOLARSHIP: {"name": "title", "organisers": "organizer_name"},
}

_FORMAT_ALIASES = {
    "in-person": EventFormat.IN_PERSON.value,
    "in person": EventFormat.IN_PERSON.value,
    "offline": EventFormat.IN_PERSON.value,
    "online": EventFormat.ONLINE.value,
    "hybrid": EventFormat.HYBRID.value,
}


def normalize_format(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return _FORMAT_ALIASES.get(value.strip().lower(), value)


def normalize(entity: str, record: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``record`` using the canonical field names for ``entity``."""

    normalized = dict(record)
    for legacy, canonical in LEGACY_ALIASES.get(entity, {}).items():
        if legacy not in normalized:
            continue
        legacy_value = normalized.pop(legacy)
        if normalized.get(canonical) in (None, ""):
            normalized[canonical] = legacy_value
    if "format" in normalized:
        normalized["format"] = normalize_format(normalized["format"])
    return normalized


def normalize_all(entity: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [normalize(entity, record) for record in records]


def display_title(record: dict[str, Any]) -> str:
    for key in ("title", "name"):
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return "Untitled"


def unique_options(values: Any) -> list[str]:
    """De-duplicate a set-of-enum value while keeping the first-seen order."""

    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    seen: list[str] = []
    for value in values:
        text = str(value).strip() if value is not None else ""
        if text and text not in seen:
            seen.append(text)
    return seen
