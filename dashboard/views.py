"""HTMX-friendly views for the campus admin dashboard."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any

from django.conf import settings
from django.contrib import messages
from django.http import Http404, HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from . import schema, services, tables
from .backend import SESSION_ACCESS_TOKEN_KEY, get_backend, sign_in, sign_out
from .choices import ViewMode, category_badge, status_badge, status_label
from .controllers import PageController
from .decorators import admin_required, is_admin_email
from .errors import AuthError, RelayError
from .forms import LoginForm, ScholarshipRelayForm
from .pages import PAGES, EntityPage, get_page
from .relay import send_scholarship_link
from .state import Failed, Succeeded

logger = logging.getLogger(__name__)

CALENDAR_KINDS = {
    tables.EVENTS: "events",
    tables.HACKATHONS: "hackathons",
    tables.SCHOLARSHIPS: "scholarships",
}

DETAIL_EXCLUDED_FIELDS = {"id", "created_at", "updated_at"}
TIMESTAMP_FIELDS = {"registration_deadline", "signup_deadline", "created_at", "updated_at"}


def _controller(request: HttpRequest, page: EntityPage) -> PageController:
    collection = tables.for_backend(get_backend(request))[page.table]
    return PageController(page, collection)


def _clear_tag(clear_after_ms: int) -> str:
    return f"autoclear clear-after-{clear_after_ms}"


def _report(request: HttpRequest, state) -> None:
    """Turn the outcome of a mutation into a banner."""

    if isinstance(state, Succeeded):
        messages.success(request, state.message, extra_tags=_clear_tag(state.clear_after_ms))
    elif isinstance(state, Failed):
        messages.error(request, state.message)


def _hx_redirect(request: HttpRequest, url: str) -> HttpResponse:
    if request.headers.get("HX-Request"):
        response = HttpResponse(status=204)
        response["HX-Redirect"] = url
        return response
    return redirect(url)


def _list_url(page: EntityPage) -> str:
    return reverse("dashboard:record-list", kwargs={"entity": page.slug})


def _summary(page: EntityPage, record: dict[str, Any]) -> dict[str, Any]:
    """Flatten a record into what the card, table and timeline partials show."""

    status = record.get("status")
    category = record.get("category")
    tags = schema.unique_options(record.get("universities")) + schema.unique_options(record.get("topics"))
    return {
        "id": record.get("id"),
        "title": schema.display_title(record) if page.entity != schema.SIGNUP else _signup_title(record),
        "summary": record.get("short_description") or record.get("description") or "",
        "starts": services.format_record_datetime(record) if record.get("start_date") else "",
        "start_time": services.parse_time(record.get("start_time")),
        "location": record.get("location") or "",
        "format": record.get("format") or "",
        "status": status_label(status) if status else "",
        "status_badge": status_badge(status),
        "category": (category or "").title(),
        "category_badge": category_badge(category),
        "is_highlight": bool(record.get("is_highlight")),
        "tags": tags,
        "link": record.get("registration_url") or record.get("application_url") or record.get("link") or "",
        "created": services.format_datetime(services.parse_datetime(record.get("created_at"))),
    }


def _signup_title(record: dict[str, Any]) -> str:
    for key in ("name", "full_name", "email"):
        if record.get(key):
            return str(record[key])
    return f"Signup {record.get('id', '')}".strip()


def _display_value(name: str, value: Any) -> str:
    if value is None or value == "" or value == []:
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if name in TIMESTAMP_FIELDS:
        return services.format_datetime(services.parse_datetime(value))
    if name.endswith("_date"):
        return services.format_date(services.parse_date(value))
    if name == "status":
        return status_label(value)
    return str(value)


def _detail_fields(page: EntityPage, record: dict[str, Any]) -> list[tuple[str, str]]:
    names = schema.CANONICAL_FIELDS.get(page.entity) or tuple(record)
    return [
        (name.replace("_", " ").capitalize(), _display_value(name, record.get(name)))
        for name in names
        if name not in DETAIL_EXCLUDED_FIELDS
    ]


def _load_record(request: HttpRequest, page: EntityPage, pk: str) -> tuple[PageController, dict[str, Any] | None]:
    controller = _controller(request, page)
    state = controller.load()
    if isinstance(state, Failed):
        messages.error(request, state.message)
        return controller, None
    record = controller.find(pk)
    if record is None:
        raise Http404(f"No {page.singular.lower()} with id {pk}")
    return controller, record


# ---------- auth ----------


def login_view(request: HttpRequest) -> HttpResponse:
    if request.session.get(SESSION_ACCESS_TOKEN_KEY):
        return redirect("dashboard:home")

    next_url = request.POST.get("next") or request.GET.get("next") or ""
    form = LoginForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            email = sign_in(request, form.cleaned_data["email"], form.cleaned_data["password"])
        except AuthError as exc:
            form.add_error(None, exc.message)
        except ValueError as exc:
            logger.error("Supabase is not configured: %s", exc)
            form.add_error(None, str(exc))
        else:
            if not is_admin_email(email):
                return redirect("dashboard:unauthorized")
            if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                return redirect(next_url)
            return redirect("dashboard:home")

    return render(request, "dashboard/login.html", {"form": form, "next": next_url})


@require_POST
def logout_view(request: HttpRequest) -> HttpResponse:
    sign_out(request)
    messages.info(request, "You have been signed out.")
    return redirect("dashboard:login")


def unauthorized(request: HttpRequest) -> HttpResponse:
    return render(request, "dashboard/unauthorized.html", status=403)


# ---------- home ----------


def _calendar_context(backend, year: int, month: int) -> dict[str, Any]:
    sources = tables.calendar_records(backend)
    items: list[services.CalendarItem] = []
    for table, records in sources.items():
        page = next(p for p in PAGES.values() if p.table == table)
        items.extend(services.calendar_items(CALENDAR_KINDS[table], schema.normalize_all(page.entity, records)))

    prev_year, prev_month = services.shift_month(year, month, -1)
    next_year, next_month = services.shift_month(year, month, 1)
    return {
        "weeks": services.calendar_month(
            items, year, month, per_day=settings.DASHBOARD_CALENDAR_ITEMS_PER_DAY
        ),
        "month_start": date(year, month, 1),
        "prev_month": f"{prev_year:04d}-{prev_month:02d}",
        "next_month": f"{next_year:04d}-{next_month:02d}",
        "upcoming": services.upcoming(items, limit=settings.DASHBOARD_UPCOMING_LIMIT),
        "weekday_names": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    }


@admin_required
def home(request: HttpRequest) -> HttpResponse:
    """Statistics tiles, the month calendar and the upcoming list."""

    year, month = services.parse_month(request.GET.get("month"))
    backend = get_backend(request)

    if request.headers.get("HX-Request"):
        context = _calendar_context(backend, year, month)
        return render(request, "dashboard/partials/calendar.html", context)

    # statistics and calendar are independent reads
    with ThreadPoolExecutor(max_workers=2) as ex:
        counts_future = ex.submit(tables.dashboard_counts, backend)
        calendar_future = ex.submit(_calendar_context, backend, year, month)
        counts = counts_future.result()
        context = calendar_future.result()

    context["stats"] = [(page, counts.get(page.table, 0)) for page in PAGES.values()]
    context["today"] = timezone.localdate()
    return render(request, "dashboard/home.html", context)


# ---------- entity pages ----------


@admin_required
def record_list(request: HttpRequest, entity: str) -> HttpResponse:
    page = get_page(entity)
    controller = _controller(request, page)
    state = controller.load()

    query = request.GET.get("q", "")
    view_mode = ViewMode.parse(request.GET.get("view"))
    if view_mode == ViewMode.CHRONOLOGICAL and not page.chronological:
        view_mode = ViewMode.CARD

    records = controller.filtered(query)
    groups = []
    if view_mode == ViewMode.CHRONOLOGICAL:
        groups = [
            {"label": group.label, "weekday": group.weekday, "day": group.day,
             "records": [_summary(page, record) for record in group.records]}
            for group in controller.grouped(query)
        ]

    context = {
        "page": page,
        "records": [_summary(page, record) for record in records],
        "total": len(controller.records),
        "groups": groups,
        "query": query,
        "view_mode": view_mode.value,
        "view_modes": [mode for mode in ViewMode if page.chronological or mode != ViewMode.CHRONOLOGICAL],
        "error": state.message if isinstance(state, Failed) else "",
        "relay_form": ScholarshipRelayForm() if page.relay else None,
    }
    template = "dashboard/partials/record_list.html" if request.headers.get("HX-Request") else "dashboard/record_list.html"
    return render(request, template, context)


@admin_required
def record_detail(request: HttpRequest, entity: str, pk: str) -> HttpResponse:
    page = get_page(entity)
    _, record = _load_record(request, page, pk)
    if record is None:
        return redirect(_list_url(page))
    context = {
        "page": page,
        "record": record,
        "summary": _summary(page, record),
        "fields": _detail_fields(page, record),
    }
    return render(request, "dashboard/record_detail.html", context)


@admin_required
def record_create(request: HttpRequest, entity: str) -> HttpResponse:
    page = get_page(entity)
    if not page.editable:
        raise Http404(f"{page.label} cannot be created here")

    form = page.form_class(request.POST or None)
    error = ""
    if request.method == "POST":
        controller = _controller(request, page)
        controller.load()
        state = controller.save(form)
        if isinstance(state, Succeeded) or (isinstance(state, Failed) and state.committed):
            _report(request, state)
            return redirect(_list_url(page))
        error = state.message if isinstance(state, Failed) else form.summary_error() or ""

    context = {"page": page, "form": form, "error": error, "is_create": True}
    return render(request, "dashboard/record_form.html", context)


@admin_required
def record_update(request: HttpRequest, entity: str, pk: str) -> HttpResponse:
    page = get_page(entity)
    if not page.editable:
        raise Http404(f"{page.label} cannot be edited here")

    controller, record = _load_record(request, page, pk)
    if record is None:
        return redirect(_list_url(page))

    form = page.form_class(request.POST or None, initial=page.form_class.initial_from_record(record))
    error = ""
    if request.method == "POST":
        state = controller.save(form, record_id=record["id"])
        if isinstance(state, Succeeded) or (isinstance(state, Failed) and state.committed):
            _report(request, state)
            return redirect(_list_url(page))
        error = state.message if isinstance(state, Failed) else form.summary_error() or ""

    context = {"page": page, "form": form, "record": record, "error": error, "is_create": False}
    return render(request, "dashboard/record_form.html", context)


@admin_required
def record_delete(request: HttpRequest, entity: str, pk: str) -> HttpResponse:
    """GET asks for confirmation, POST with ``confirm=yes`` deletes."""

    page = get_page(entity)
    controller, record = _load_record(request, page, pk)
    if record is None:
        return _hx_redirect(request, _list_url(page))

    if request.method != "POST":
        controller.request_delete(record)
        context = {"page": page, "record": record, "summary": _summary(page, record)}
        return render(request, "dashboard/record_confirm_delete.html", context)

    state = controller.delete(record, confirmed=request.POST.get("confirm") == "yes")
    _report(request, state)
    return _hx_redirect(request, _list_url(page))


@require_POST
@admin_required
def record_highlight(request: HttpRequest, entity: str, pk: str) -> HttpResponse:
    page = get_page(entity)
    if not page.highlightable:
        raise Http404(f"{page.label} cannot be highlighted")

    controller, record = _load_record(request, page, pk)
    if record is not None:
        _report(request, controller.toggle_highlight(record))
    return _hx_redirect(request, _list_url(page))


@require_POST
@admin_required
def scholarship_relay(request: HttpRequest) -> HttpResponse:
    """Hand a scholarship link to the automation webhook."""

    page = PAGES["scholarships"]
    form = ScholarshipRelayForm(request.POST)
    if not form.is_valid():
        messages.error(request, form.errors["scholarship_link"][0])
        return _hx_redirect(request, _list_url(page))

    try:
        sent = send_scholarship_link(form.cleaned_data["scholarship_link"])
    except RelayError as exc:
        messages.error(request, exc.message)
    else:
        if sent:
            messages.success(
                request,
                "Scholarship link sent successfully!",
                extra_tags=_clear_tag(settings.DASHBOARD_RELAY_SUCCESS_CLEAR_MS),
            )
        else:
            messages.warning(request, "The scholarship webhook is not configured.")
    return _hx_redirect(request, _list_url(page))
