"""Tests for search, grouping, calendar and the legacy field adapter."""

from __future__ import annotations

from datetime import date, datetime, time

from django.test import SimpleTestCase, override_settings

from dashboard import schema, services


class SearchTests(SimpleTestCase):
    def setUp(self) -> None:
        self.events = [
            {"id": 1, "title": "Demo Day", "description": "Startups pitch", "location": "Garching"},
            {"id": 2, "name": "Legacy Meetup", "organisers": "TUM.ai", "location": "Munich"},
            {"id": 3, "title": "Workshop", "description": None, "location": ""},
        ]

    def test_blank_query_matches_everything(self) -> None:
        self.assertEqual(len(services.filter_records(self.events, "   ", services.EVENT_SEARCH_FIELDS)), 3)
        self.assertEqual(len(services.filter_records(self.events, None, services.EVENT_SEARCH_FIELDS)), 3)

    def test_query_is_case_insensitive_substring(self) -> None:
        found = services.filter_records(self.events, "DEMO", services.EVENT_SEARCH_FIELDS)
        self.assertEqual([record["id"] for record in found], [1])

    def test_legacy_field_names_are_searched(self) -> None:
        found = services.filter_records(self.events, "tum.ai", services.EVENT_SEARCH_FIELDS)
        self.assertEqual([record["id"] for record in found], [2])
        found = services.filter_records(self.events, "legacy", services.EVENT_SEARCH_FIELDS)
        self.assertEqual([record["id"] for record in found], [2])

    def test_club_lists_are_searched(self) -> None:
        clubs = [
            {"id": 1, "name": "Robo Club", "description": "", "link": "", "universities": ["TUM"], "topics": ["Robotics"]},
            {"id": 2, "name": "Law Society", "description": "", "link": "", "universities": ["LMU"], "topics": ["Legal"]},
        ]
        found = services.filter_records(clubs, "lmu", services.STUDENT_CLUB_SEARCH_FIELDS)
        self.assertEqual([club["id"] for club in found], [2])

    def test_without_fields_every_string_value_is_searched(self) -> None:
        self.assertTrue(services.matches_query({"email": "ada@example.com"}, "ADA"))
        self.assertFalse(services.matches_query({"count": 5}, "5"))


class DateHelperTests(SimpleTestCase):
    def test_combine_date_time(self) -> None:
        self.assertEqual(services.combine_date_time("2025-03-01", "14:30"), datetime(2025, 3, 1, 14, 30))
        self.assertEqual(services.combine_date_time("2025-03-01"), datetime(2025, 3, 1, 0, 0))
        self.assertEqual(services.combine_date_time("2025-03-01", "ab:cd"), datetime(2025, 3, 1, 0, 0))
        self.assertIsNone(services.combine_date_time(None, "10:00"))
        self.assertIsNone(services.combine_date_time("not a date"))

    @override_settings(TIME_ZONE="Europe/Berlin")
    def test_aware_timestamps_are_shown_in_local_time(self) -> None:
        parsed = services.parse_datetime("2025-03-01T13:30:00+00:00")
        self.assertEqual(parsed, datetime(2025, 3, 1, 14, 30))

    def test_format_datetime(self) -> None:
        self.assertEqual(services.format_datetime(datetime(2025, 3, 1, 14, 30)), "Mar 1, 2025, 2:30 PM")
        self.assertEqual(services.format_datetime(datetime(2025, 3, 1, 0, 5)), "Mar 1, 2025, 12:05 AM")
        self.assertEqual(services.format_datetime(None), "-")

    def test_day_labels(self) -> None:
        today = date(2025, 3, 1)
        self.assertEqual(services.day_label(date(2025, 3, 1), today), "Today")
        self.assertEqual(services.day_label(date(2025, 3, 2), today), "Tomorrow")
        self.assertEqual(services.day_label(date(2025, 3, 10), today), "Mar 10")
        self.assertEqual(services.weekday_name(date(2025, 3, 1)), "Saturday")

    def test_month_navigation(self) -> None:
        self.assertEqual(services.shift_month(2025, 1, -1), (2024, 12))
        self.assertEqual(services.shift_month(2025, 12, 1), (2026, 1))
        today = date(2025, 5, 20)
        self.assertEqual(services.parse_month("2025-03", today), (2025, 3))
        self.assertEqual(services.parse_month("2025-13", today), (2025, 5))
        self.assertEqual(services.parse_month("garbage", today), (2025, 5))
        self.assertEqual(services.parse_month(None, today), (2025, 5))


class GroupByDayTests(SimpleTestCase):
    def test_groups_sorted_by_day_then_time_then_id(self) -> None:
        records = [
            {"id": 7, "title": "Late", "start_date": "2025-03-01", "start_time": "18:00:00"},
            {"id": 3, "title": "Next day", "start_date": "2025-03-02"},
            {"id": 5, "title": "Morning B", "start_date": "2025-03-01"},
            {"id": 4, "title": "Morning A", "start_date": "2025-03-01"},
            {"id": 9, "title": "Undated"},
        ]
        groups = services.group_by_day(records)
        self.assertEqual([group.day for group in groups], [date(2025, 3, 1), date(2025, 3, 2)])
        self.assertEqual([r["id"] for r in groups[0].records], [4, 5, 7])
        self.assertEqual([r["id"] for r in groups[1].records], [3])

    def test_timestamp_start_dates_are_grouped_by_their_day(self) -> None:
        groups = services.group_by_day([{"id": 1, "start_date": "2025-03-01T09:15:00"}])
        self.assertEqual(groups[0].day, date(2025, 3, 1))


class CalendarTests(SimpleTestCase):
    def test_month_grid_is_monday_first(self) -> None:
        weeks = services.calendar_month([], 2025, 3, today=date(2025, 3, 14))
        self.assertEqual(len(weeks), 6)
        self.assertEqual(weeks[0][0].day, date(2025, 2, 24))
        self.assertFalse(weeks[0][0].in_month)
        self.assertEqual(weeks[-1][-1].day, date(2025, 4, 6))
        today_cells = [cell for week in weeks for cell in week if cell.is_today]
        self.assertEqual([cell.day for cell in today_cells], [date(2025, 3, 14)])

    def test_multi_day_items_fill_every_day_and_overflow_is_counted(self) -> None:
        items = services.calendar_items(
            "hackathons",
            [
                {"id": 1, "title": "Hackathon Munich 2025", "start_date": "2025-03-10", "end_date": "2025-03-12"},
                {"id": 2, "title": "Pitch", "start_date": "2025-03-11"},
                {"id": 3, "title": "Talk", "start_date": "2025-03-11", "start_time": "09:00"},
                {"id": 4, "title": "No date"},
            ],
        )
        self.assertEqual(len(items), 3)
        weeks = services.calendar_month(items, 2025, 3, today=date(2025, 3, 1), per_day=2)
        cells = {cell.day: cell for week in weeks for cell in week}
        self.assertEqual([item.id for item in cells[date(2025, 3, 10)].items], [1])
        self.assertEqual([item.id for item in cells[date(2025, 3, 12)].items], [1])
        self.assertEqual(len(cells[date(2025, 3, 11)].items), 2)
        self.assertEqual(cells[date(2025, 3, 11)].overflow, 1)
        self.assertEqual(cells[date(2025, 3, 13)].items, [])
        self.assertEqual(items[0].short_title, "Hackathon Munic...")
        self.assertEqual(items[1].short_title, "Pitch")

    def test_occupies_day_for_records(self) -> None:
        record = {"start_date": "2025-03-10", "end_date": "2025-03-12"}
        self.assertTrue(services.occupies_day(record, date(2025, 3, 11)))
        self.assertFalse(services.occupies_day(record, date(2025, 3, 13)))
        self.assertTrue(services.occupies_day({"start_date": "2025-03-10"}, date(2025, 3, 10)))
        self.assertFalse(services.occupies_day({}, date(2025, 3, 10)))

    def test_upcoming_skips_past_items_and_limits(self) -> None:
        records = [{"id": i, "title": f"E{i}", "start_date": f"2025-03-{i:02d}"} for i in range(1, 20)]
        items = services.calendar_items("events", records)
        result = services.upcoming(items, now=datetime(2025, 3, 5, 12, 0), limit=3)
        self.assertEqual([item.id for item in result], [6, 7, 8])


class SchemaTests(SimpleTestCase):
    def test_legacy_event_fields_are_renamed(self) -> None:
        record = {"id": 1, "name": "Demo", "organisers": "TUM.ai", "link": "https://x.org", "format": "Online"}
        normalized = schema.normalize(schema.EVENT, record)
        self.assertEqual(normalized["title"], "Demo")
        self.assertEqual(normalized["organizer_name"], "TUM.ai")
        self.assertEqual(normalized["registration_url"], "https://x.org")
        self.assertEqual(normalized["format"], "online")
        self.assertNotIn("name", normalized)
        self.assertEqual(record["name"], "Demo")

    def test_canonical_value_wins_over_legacy(self) -> None:
        normalized = schema.normalize(schema.HACKATHON, {"title": "New", "name": "Old", "format": "In Person"})
        self.assertEqual(normalized["title"], "New")
        self.assertEqual(normalized["format"], "in-person")

    def test_student_clubs_keep_their_name(self) -> None:
        normalized = schema.normalize(schema.STUDENT_CLUB, {"name": "Robo Club", "link": "https://robo.club"})
        self.assertEqual(normalized, {"name": "Robo Club", "link": "https://robo.club"})

    def test_display_title_and_unique_options(self) -> None:
        self.assertEqual(schema.display_title({"title": "  "}), "Untitled")
        self.assertEqual(schema.display_title({"name": "Club"}), "Club")
        self.assertEqual(schema.unique_options(["AI", "AI", " Robotics ", "", None]), ["AI", "Robotics"])
        self.assertEqual(schema.unique_options(None), [])
