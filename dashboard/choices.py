"""Enumerations shared by forms, templates and the schema adapter."""
from __future__ import annotations

from django.db import models


class EventFormat(models.TextChoices):
    IN_PERSON = "in-person", "In-Person"
    ONLINE = "online", "Online"
    HYBRID = "hybrid", "Hybrid"


class EventStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"
    CANCELLED = "cancelled", "Cancelled"
    COMPLETED = "completed", "Completed"
    POSTPONED = "postponed", "Postponed"


class EventCategory(models.TextChoices):
    WORKSHOP = "workshop", "Workshop"
    CONFERENCE = "conference", "Conference"
    MEETUP = "meetup", "Meetup"
    WEBINAR = "webinar", "Webinar"
    NETWORKING = "networking", "Networking"
    TRAINING = "training", "Training"
    HACKATHON = "hackathon", "Hackathon"
    OTHER = "other", "Other"


class ScholarshipStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"
    CANCELLED = "cancelled", "Cancelled"
    COMPLETED = "completed", "Completed"
    POSTPONED = "postponed", "Postponed"
    ACCEPTING_APPLICATIONS = "accepting_applications", "Accepting Applications"
    REVIEWING = "reviewing", "Reviewing"
    AWARDED = "awarded", "Awarded"
    CLOSED = "closed", "Closed"


class ViewMode(models.TextChoices):
    CARD = "card", "Cards"
    TABLE = "table", "Table"
    CHRONOLOGICAL = "chronological", "Chronological"

    @classmethod
    def parse(cls, value: str | None) -> "ViewMode":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.CARD


STATUS_BADGE_CLASSES = {
    "draft": "bg-gray-100 text-gray-800",
    "published": "bg-green-100 text-green-800",
    "cancelled": "bg-red-100 text-red-800",
    "completed": "bg-blue-100 text-blue-800",
    "postponed": "bg-yellow-100 text-yellow-800",
    "accepting_applications": "bg-emerald-100 text-emerald-800",
    "reviewing": "bg-purple-100 text-purple-800",
    "awarded": "bg-indigo-100 text-indigo-800",
    "closed": "bg-gray-100 text-gray-800",
}

CATEGORY_BADGE_CLASSES = {
    "workshop": "bg-purple-100 text-purple-800",
    "conference": "bg-indigo-100 text-indigo-800",
    "meetup": "bg-pink-100 text-pink-800",
    "webinar": "bg-cyan-100 text-cyan-800",
    "networking": "bg-orange-100 text-orange-800",
    "training": "bg-teal-100 text-teal-800",
    "hackathon": "bg-emerald-100 text-emerald-800",
    "other": "bg-gray-100 text-gray-800",
}


def status_label(value: str | None) -> str:
    choices = dict(ScholarshipStatus.choices)
    return choices.get(value or "", choices[ScholarshipStatus.DRAFT])


def status_badge(value: str | None) -> str:
    return STATUS_BADGE_CLASSES.get(value or "", STATUS_BADGE_CLASSES["draft"])


def category_badge(value: str | None) -> str:
    return CATEGORY_BADGE_CLASSES.get(value or "", CATEGORY_BADGE_CLASSES["other"])
