"""Forms for the campus admin dashboard."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from django import forms
from django.conf import settings
from django.utils import timezone

from . import schema, services
from .choices import EventCategory, EventFormat, EventStatus, ScholarshipStatus


URL_MESSAGE = "Please enter a valid URL (e.g., https://example.com)"
END_BEFORE_START_MESSAGE = "End date cannot be before the start date."
DEADLINE_AFTER_START_MESSAGE = "Registration deadline must be on or before the start date."

LIGHT_TEXT_INPUT_CLASSES = (
    "mt-1 w-full rounded-lg border border-slate-300 bg-white px-3 py-2 text-sm text-slate-800 "
    "shadow-sm focus:border-sky-500 focus:ring focus:ring-sky-200/60 focus:outline-none"
)
LIGHT_CHECKBOX_CLASSES = (
    "h-4 w-4 rounded border-slate-300 text-sky-600 focus:ring-sky-500 focus:ring-offset-0"
)


def _url_field(label: str, *, required: bool = False) -> forms.URLField:
    return forms.URLField(
        label=label,
        required=required,
        assume_scheme="https",
        error_messages={"invalid": URL_MESSAGE},
        widget=forms.URLInput(attrs={"placeholder": "https://example.com"}),
    )


def _date_field(label: str, *, required: bool = False) -> forms.DateField:
    return forms.DateField(label=label, required=required, widget=forms.DateInput(attrs={"type": "date"}))


def _time_field(label: str) -> forms.TimeField:
    return forms.TimeField(
        label=label,
        required=False,
        widget=forms.TimeInput(attrs={"type": "time", "step": "60"}, format="%H:%M"),
    )


class RecordForm(forms.Form):
    """Shared submit-time behaviour of the entity forms.

    Subclasses list which fields are calendar dates, which are times of day
    and which date fields are paired with a time field and sent as a single
    timestamp.
    """

    entity: str = ""
    date_fields: tuple[str, ...] = ()
    time_fields: tuple[str, ...] = ()
    datetime_pairs: dict[str, str] = {}

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._apply_input_styling()

    def _apply_input_styling(self) -> None:
        for field in self.fields.values():
            widget = field.widget
            existing = widget.attrs.get("class", "")
            if isinstance(widget, (forms.CheckboxInput, forms.CheckboxSelectMultiple)):
                widget.attrs["class"] = f"{existing} {LIGHT_CHECKBOX_CLASSES}".strip()
            else:
                widget.attrs["class"] = f"{existing} {LIGHT_TEXT_INPUT_CLASSES}".strip()
            if isinstance(widget, forms.NumberInput):
                widget.attrs.setdefault("min", "0")

    def summary_error(self) -> str | None:
        """The single message shown in the form banner after a rejected submit."""

        if not self.is_bound or not self.errors:
            return None
        non_field = self.non_field_errors()
        if non_field:
            return non_field[0]
        for name, errors in self.errors.items():
            label = self[name].label if name in self.fields else name
            return f"{label}: {errors[0]}"
        return None

    def to_payload(self) -> dict[str, Any]:
        """Serialise cleaned data into the record sent to the backend."""

        data = self.cleaned_data
        paired_times = set(self.datetime_pairs.values())
        payload: dict[str, Any] = {}
        for name in self.fields:
            if name in paired_times:
                continue
            value = data.get(name)
            if name in self.datetime_pairs:
                combined = services.combine_date_time(value, data.get(self.datetime_pairs[name]))
                payload[name] = timezone.make_aware(combined).isoformat() if combined else None
            elif name in self.date_fields:
                payload[name] = value.isoformat() if value else None
            elif name in self.time_fields:
                payload[name] = value.strftime("%H:%M:%S") if value else None
            elif isinstance(value, Decimal):
                payload[name] = str(value)
            elif isinstance(value, str):
                payload[name] = value.strip() or None
            else:
                payload[name] = value
        return payload

    @classmethod
    def initial_from_record(cls, record: dict[str, Any]) -> dict[str, Any]:
        """Initial form data for editing ``record``."""

        normalized = schema.normalize(cls.entity, record)
        initial: dict[str, Any] = {}
        for name in cls.date_fields:
            parsed = services.parse_datetime(normalized.get(name))
            if parsed is None:
                continue
            initial[name] = parsed.date()
            time_name = name.replace("_date", "_time")
            if time_name in cls.time_fields and not normalized.get(time_name) and parsed.time() != parsed.time().min:
                # legacy rows kept the time inside the timestamp
                initial[time_name] = parsed.time()
        for name in cls.time_fields:
            if normalized.get(name):
                initial[name] = services.parse_time(normalized[name])
        for name, time_name in cls.datetime_pairs.items():
            parsed = services.parse_datetime(normalized.get(name))
            if parsed is None:
                continue
            initial[name] = parsed.date()
            if parsed.time() != parsed.time().min:
                initial[time_name] = parsed.time()
        handled = set(cls.date_fields) | set(cls.time_fields) | set(cls.datetime_pairs)
        for name in cls.base_fields:
            if name in handled or name in initial:
                continue
            if name in normalized and normalized[name] is not None:
                initial[name] = normalized[name]
        return initial


class EventForm(RecordForm):
    """Create or edit an event."""

    entity = schema.EVENT
    date_fields = ("start_date", "end_date")
    time_fields = ("start_time", "end_time")
    datetime_pairs = {"registration_deadline": "registration_deadline_time"}

    title = forms.CharField(label="Title", max_length=200)
    short_description = forms.CharField(label="Short description", max_length=300, required=False)
    description = forms.CharField(label="Description", required=False, widget=forms.Textarea(attrs={"rows": 4}))
    start_date = _date_field("Start date", required=True)
    start_time = _time_field("Start time")
    end_date = _date_field("End date")
    end_time = _time_field("End time")
    duration = forms.IntegerField(label="Duration (minutes)", min_value=0, required=False)
    location = forms.CharField(label="Location", max_length=255, required=False)
    format = forms.ChoiceField(label="Format", choices=EventFormat.choices, initial=EventFormat.IN_PERSON)
    status = forms.ChoiceField(label="Status", choices=EventStatus.choices, initial=EventStatus.DRAFT)
    category = forms.ChoiceField(label="Category", choices=EventCategory.choices, initial=EventCategory.OTHER)
    registration_url = _url_field("Registration URL")
    registration_deadline = _date_field("Registration deadline")
    registration_deadline_time = _time_field("Registration deadline time")
    capacity = forms.IntegerField(label="Capacity", min_value=0, required=False)
    organizer_name = forms.CharField(label="Organizer", max_length=200, required=False)
    organizer_contactinfo = forms.CharField(label="Organizer contact", max_length=200, required=False)
    requirements = forms.CharField(label="Requirements", required=False, widget=forms.Textarea(attrs={"rows": 2}))
    posted_linkedin = forms.BooleanField(label="Posted on LinkedIn", required=False)
    posted_whatsapp = forms.BooleanField(label="Posted on WhatsApp", required=False)
    posted_newsletter = forms.BooleanField(label="Posted in Newsletter", required=False)
    is_highlight = forms.BooleanField(label="Highlight", required=False)

    def clean(self):
        cleaned_data = super().clean()
        start, end = cleaned_data.get("start_date"), cleaned_data.get("end_date")
        if start and end and end < start:
            self.add_error(None, END_BEFORE_START_MESSAGE)
        deadline = cleaned_data.get("registration_deadline")
        if start and deadline and deadline > start:
            self.add_error(None, DEADLINE_AFTER_START_MESSAGE)
        return cleaned_data


class HackathonForm(EventForm):
    """Events plus prizes and a signup deadline."""

    entity = schema.HACKATHON
    datetime_pairs = {
        "registration_deadline": "registration_deadline_time",
        "signup_deadline": "signup_deadline_time",
    }

    prizes = forms.CharField(label="Prizes", required=False, widget=forms.Textarea(attrs={"rows": 2}))
    signup_deadline = _date_field("Signup deadline")
    signup_deadline_time = _time_field("Signup deadline time")

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fields["category"].initial = EventCategory.HACKATHON


class ScholarshipForm(RecordForm):
    """Scholarships use start/end date as the application window."""

    entity = schema.SCHOLARSHIP
    date_fields = ("start_date", "end_date")

    title = forms.CharField(label="Title", max_length=200)
    short_description = forms.CharField(label="Short description", max_length=300, required=False)
    description = forms.CharField(label="Description", required=False, widget=forms.Textarea(attrs={"rows": 4}))
    start_date = _date_field("Applications open", required=True)
    end_date = _date_field("Applications close")
    award_amount = forms.DecimalField(
        label="Award amount", min_value=Decimal("0"), max_digits=12, decimal_places=2, required=False
    )
    award_currency = forms.CharField(label="Currency", max_length=3, required=False, initial="EUR")
    application_url = _url_field("Application URL")
    organizer_name = forms.CharField(label="Organizer", max_length=200, required=False)
    organizer_contactinfo = forms.CharField(label="Organizer contact", max_length=200, required=False)
    location = forms.CharField(label="Location", max_length=255, required=False)
    status = forms.ChoiceField(label="Status", choices=ScholarshipStatus.choices, initial=ScholarshipStatus.DRAFT)
    category = forms.ChoiceField(
        label="Category", choices=[("", "---------")] + list(EventCategory.choices), required=False
    )
    image_url = _url_field("Image URL")

    def clean_award_currency(self) -> str:
        return (self.cleaned_data.get("award_currency") or "").strip().upper()

    def clean(self):
        cleaned_data = super().clean()
        start, end = cleaned_data.get("start_date"), cleaned_data.get("end_date")
        if start and end and end < start:
            self.add_error(None, END_BEFORE_START_MESSAGE)
        return cleaned_data


class StudentClubForm(RecordForm):
    """Student clubs with universities/topics picked from configured options."""

    entity = schema.STUDENT_CLUB

    name = forms.CharField(label="Name", max_length=200)
    description = forms.CharField(label="Description", widget=forms.Textarea(attrs={"rows": 4}))
    link = _url_field("Link", required=True)
    universities = forms.MultipleChoiceField(
        label="Universities", required=False, widget=forms.CheckboxSelectMultiple
    )
    topics = forms.MultipleChoiceField(label="Topics", required=False, widget=forms.CheckboxSelectMultiple)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fields["universities"].choices = self._option_choices(
            settings.DASHBOARD_UNIVERSITY_OPTIONS, "universities"
        )
        self.fields["topics"].choices = self._option_choices(settings.DASHBOARD_TOPIC_OPTIONS, "topics")

    def _option_choices(self, options: list[str], name: str) -> list[tuple[str, str]]:
        """Configured options plus any legacy value already stored on the record."""

        values = list(options)
        for existing in schema.unique_options(self.initial.get(name)):
            if existing not in values:
                values.append(existing)
        return [(value, value) for value in values]

    def to_payload(self) -> dict[str, Any]:
        data = self.cleaned_data
        universities = schema.unique_options(data.get("universities"))
        topics = schema.unique_options(data.get("topics"))
        return {
            "name": data["name"].strip(),
            "description": data["description"].strip(),
            "link": data["link"].strip(),
            "universities": universities or None,
            "topics": topics or None,
        }

    @classmethod
    def initial_from_record(cls, record: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": record.get("name") or "",
            "description": record.get("description") or "",
            "link": record.get("link") or "",
            "universities": schema.unique_options(record.get("universities")),
            "topics": schema.unique_options(record.get("topics")),
        }


class ScholarshipRelayForm(forms.Form):
    """Send a scholarship link to the configured automation webhook."""

    scholarship_link = forms.URLField(
        label="Scholarship link",
        assume_scheme="https",
        error_messages={"invalid": URL_MESSAGE},
        widget=forms.URLInput(
            attrs={"placeholder": "https://example.com/scholarship", "class": LIGHT_TEXT_INPUT_CLASSES}
        ),
    )


class LoginForm(forms.Form):
    email = forms.EmailField(widget=forms.EmailInput(attrs={"class": LIGHT_TEXT_INPUT_CLASSES}))
    password = forms.CharField(widget=forms.PasswordInput(attrs={"class": LIGHT_TEXT_INPUT_CLASSES}))


__all__ = [
    "DEADLINE_AFTER_START_MESSAGE",
    "END_BEFORE_START_MESSAGE",
    "EventForm",
    "HackathonForm",
    "LoginForm",
    "RecordForm",
    "ScholarshipForm",
    "ScholarshipRelayForm",
    "StudentClubForm",
    "URL_MESSAGE",
]
