"""Registry of the entity pages the dashboard exposes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from django.http import Http404

from . import schema, services, tables
from .forms import EventForm, HackathonForm, RecordForm, ScholarshipForm, StudentClubForm


@dataclass(frozen=True)
class EntityPage:
    slug: str
    table: str
    entity: str
    label: str
    singular: str
    form_class: type[RecordForm] | None = None
    search_fields: Sequence[services.SearchField] | None = None
    highlightable: bool = False
    chronological: bool = False
    relay: bool = False
    description: str = ""

    @property
    def editable(self) -> bool:
        return self.form_class is not None

    def message(self, verb: str) -> str:
        return f"{self.singular} {verb} successfully!"


PAGES: dict[str, EntityPage] = {
    page.slug: page
    for page in (
        EntityPage(
            slug="events",
            table=tables.EVENTS,
            entity=schema.EVENT,
            label="Events",
            singular="Event",
            form_class=EventForm,
            search_fields=services.EVENT_SEARCH_FIELDS,
            highlightable=True,
            chronological=True,
            description="Manage upcoming events, workshops and meetups.",
        ),
        EntityPage(
            slug="hackathons",
            table=tables.HACKATHONS,
            entity=schema.HACKATHON,
            label="Hackathons",
            singular="Hackathon",
            form_class=HackathonForm,
            search_fields=services.EVENT_SEARCH_FIELDS,
            highlightable=True,
            chronological=True,
            description="Manage hackathons, prizes and signup deadlines.",
        ),
        EntityPage(
            slug="scholarships",
            table=tables.SCHOLARSHIPS,
            entity=schema.SCHOLARSHIP,
            label="Scholarships",
            singular="Scholarship",
            form_class=ScholarshipForm,
            search_fields=services.SCHOLARSHIP_SEARCH_FIELDS,
            chronological=True,
            relay=True,
            description="Manage scholarships and their application windows.",
        ),
        EntityPage(
            slug="student-clubs",
            table=tables.STUDENT_CLUBS,
            entity=schema.STUDENT_CLUB,
            label="Student Clubs",
            singular="Student club",
            form_class=StudentClubForm,
            search_fields=services.STUDENT_CLUB_SEARCH_FIELDS,
            description="Manage student clubs, their universities and topics.",
        ),
        EntityPage(
            slug="signups",
            table=tables.SIGNUPS,
            entity=schema.SIGNUP,
            label="Signups",
            singular="Signup",
        ),
    )
}


def get_page(slug: str) -> EntityPage:
    try:
        return PAGES[slug]
    except KeyError:
        raise Http404(f"Unknown section {slug!r}") from None


__all__ = ["EntityPage", "PAGES", "get_page"]
