import httpx
from django.test import SimpleTestCase, override_settings

from dashboard import state
from dashboard.backend import SupabaseBackend
from dashboard.controllers import PageController
from dashboard.forms import EventForm
from dashboard.pages import PAGES
from dashboard.tables import for_backend

from .fakes import FakeSupabase, api_error


class PageStateMachineTests(SimpleTestCase):
    def test_allowed_path(self):
        machine = state.PageStateMachine()
        machine.move(state.Loaded(()))
        machine.move(state.ConfirmingDelete((), {"id": 1}))
        machine.move(state.Mutating((), "delete"))
        machine.move(state.Succeeded((), "Deleted", 1000))
        machine.move(state.Loaded(()))
        self.assertIsInstance(machine.state, state.Loaded)
        self.assertEqual(len(machine.history), 6)

    def test_illegal_moves_raise(self):
        machine = state.PageStateMachine()
        with self.assertRaises(state.InvalidTransition):
            machine.move(state.Mutating((), "create"))
        machine.move(state.Failed((), "boom"))
        with self.assertRaises(state.InvalidTransition):
            machine.move(state.Succeeded((), "ok", 0))
        with self.assertRaises(state.InvalidTransition):
            machine.move(state.ConfirmingDelete((), {}))

    def test_failed_can_retry_or_resubmit(self):
        for target in (state.Loaded(()), state.Loading(), state.Mutating((), "create")):
            machine = state.PageStateMachine(state.Failed((), "boom"))
            self.assertTrue(machine.can_move(target))


@override_settings(DASHBOARD_SUCCESS_CLEAR_MS=1000)
class PageControllerTests(SimpleTestCase):
    def setUp(self):
        self.fake = FakeSupabase(
            {
                "events": [
                    {"id": 1, "name": "Legacy Talk", "start_date": "2025-03-02", "created_at": "2024-01-01T00:00:00+00:00"},
                    {"id": 2, "title": "Demo Night", "start_date": "2025-03-01", "start_time": "19:00:00",
                     "is_highlight": False, "created_at": "2024-02-01T00:00:00+00:00"},
                ]
            }
        )
        self.page = PAGES["events"]
        self.controller = PageController(self.page, for_backend(SupabaseBackend(self.fake))["events"])

    def _event_form(self, **overrides):
        data = {"title": "Demo Day", "start_date": "2025-03-01", "format": "online", "status": "draft", "category": "other"}
        data.update(overrides)
        return EventForm(data=data)

    def test_load_normalizes_records(self):
        result = self.controller.load()
        self.assertIsInstance(result, state.Loaded)
        self.assertEqual([r["title"] for r in result.records], ["Demo Night", "Legacy Talk"])

    def test_load_failure_carries_message(self):
        self.fake.fail("events", "select", api_error("42501", "permission denied for table events"))
        result = self.controller.load()
        self.assertIsInstance(result, state.Failed)
        self.assertIn("Access denied to events.", result.message)

    def test_create_refetches_and_reports_success(self):
        self.controller.load()
        result = self.controller.save(self._event_form())
        self.assertIsInstance(result, state.Succeeded)
        self.assertEqual(result.message, "Event created successfully!")
        self.assertEqual(result.clear_after_ms, 1000)
        self.assertEqual(len(result.records), 3)
        self.assertIn("Demo Day", [r["title"] for r in result.records])
        selects = [call for call in self.fake.calls if call[1] == "select"]
        self.assertEqual(len(selects), 2)

    def test_invalid_form_never_reaches_backend(self):
        self.controller.load()
        result = self.controller.save(self._event_form(end_date="2025-01-01"))
        self.assertIsInstance(result, state.Loaded)
        self.assertFalse([call for call in self.fake.calls if call[1] == "insert"])

    def test_backend_write_error_becomes_failed_state(self):
        self.fake.fail("events", "insert", api_error("23505", "duplicate key"))
        self.controller.load()
        result = self.controller.save(self._event_form())
        self.assertIsInstance(result, state.Failed)
        self.assertEqual(result.message, "A record with this information already exists.")
        self.assertEqual(len(result.records), 2)

    def test_update_of_stale_record_fails_with_not_found(self):
        self.controller.load()
        result = self.controller.save(self._event_form(), record_id=404)
        self.assertIsInstance(result, state.Failed)
        self.assertEqual(result.message, "Record not found. It may have been deleted.")

    def test_delete_needs_confirmation(self):
        self.controller.load()
        record = self.controller.find("2")
        self.assertIsInstance(self.controller.request_delete(record), state.ConfirmingDelete)

        cancelled = self.controller.delete(record, confirmed=False)
        self.assertIsInstance(cancelled, state.Loaded)
        self.assertEqual(len(self.fake.rows["events"]), 2)

        deleted = self.controller.delete(record, confirmed=True)
        self.assertIsInstance(deleted, state.Succeeded)
        self.assertEqual(deleted.message, "Event deleted successfully!")
        self.assertEqual([r["id"] for r in deleted.records], [1])

    def test_delete_error_message_is_shown_verbatim(self):
        self.fake.fail("events", "delete", api_error("XX000", "update or delete violates foreign key"))
        self.controller.load()
        result = self.controller.delete(self.controller.find(1), confirmed=True)
        self.assertIsInstance(result, state.Failed)
        self.assertEqual(result.message, "update or delete violates foreign key")

    def test_toggle_highlight(self):
        self.controller.load()
        result = self.controller.toggle_highlight(self.controller.find(2))
        self.assertIsInstance(result, state.Succeeded)
        self.assertTrue(self.controller.find(2)["is_highlight"])
        self.assertEqual(result.message, "Demo Night highlighted.")

    def test_filtered_and_grouped(self):
        self.controller.load()
        self.assertEqual([r["id"] for r in self.controller.filtered("legacy")], [1])
        groups = self.controller.grouped()
        self.assertEqual([[r["id"] for r in group.records] for group in groups], [[2], [1]])
        self.assertIsNone(self.controller.find("missing"))

    def test_unreachable_backend_on_load_becomes_failed_state(self):
        self.fake.fail("events", "select", httpx.ConnectError("connection refused"))
        result = self.controller.load()
        self.assertIsInstance(result, state.Failed)
        self.assertIn("connection refused", result.message)
        self.assertFalse(result.committed)

    def test_timed_out_write_keeps_records_and_allows_retry(self):
        self.controller.load()
        self.fake.fail("events", "insert", httpx.ReadTimeout("timed out"), times=1)
        result = self.controller.save(self._event_form())
        self.assertIsInstance(result, state.Failed)
        self.assertIn("timed out", result.message)
        self.assertFalse(result.committed)
        self.assertEqual(len(result.records), 2)

        retried = self.controller.save(self._event_form())
        self.assertIsInstance(retried, state.Succeeded)
        self.assertEqual(len(retried.records), 3)

    def test_failed_reload_after_write_is_marked_committed(self):
        self.controller.load()
        self.fake.fail("events", "select", httpx.ConnectError("connection reset"), times=1)
        result = self.controller.save(self._event_form())
        self.assertIsInstance(result, state.Failed)
        self.assertTrue(result.committed)
        self.assertIn("connection reset", result.message)
        self.assertEqual(len(self.fake.rows["events"]), 3)
