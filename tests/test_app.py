"""Tests for the menu-bar app logic.

ClipstashApp inherits from rumps.App, so the app is built without running
__init__ and the methods are exercised with mocked pasteboard and rumps calls.
"""
from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("rumps")
pytest.importorskip("AppKit")

from clipstash.app import ENTRY_KEY_PREFIX, ClipstashApp, MenuItemSpec  # noqa: E402
from clipstash.models import CapturedContent  # noqa: E402
from clipstash.retention import RetentionManager  # noqa: E402
from clipstash.view import HistoryView  # noqa: E402


@pytest.fixture
def app(lifecycle, notifier, clock):
    instance = ClipstashApp.__new__(ClipstashApp)
    instance._notifier = notifier
    instance._lifecycle = lifecycle
    instance._records = lifecycle.records
    instance._retention = RetentionManager(lifecycle, now=clock)
    instance._pasteboard = MagicMock()
    instance._view = HistoryView(lifecycle.records.scan_items())
    instance._entry_ids = {}
    instance._build_menu = MagicMock()
    return instance


def _sender(entry_id):
    sender = MagicMock()
    sender._id = f"{ENTRY_KEY_PREFIX}{entry_id}"
    return sender


class TestMenuSpecs:
    def test_empty_history(self, app):
        titles = [s.title for s in app._compute_menu_specs() if s is not None]
        assert "(No clipboard history)" in titles
        assert "Delete All" in titles

    def test_entries_listed_newest_first(self, app, lifecycle, clock):
        lifecycle.capture(CapturedContent.from_text("first"))
        clock.advance(minutes=1)
        lifecycle.capture(CapturedContent.from_text("second"))
        app._view.apply(app._notifier.drain())

        entry_specs = [s for s in app._compute_menu_specs() if s is not None and s.entry_id is not None]
        assert [s.title for s in entry_specs] == ["second", "first"]
        assert set(app._entry_ids.values()) == {s.entry_id for s in entry_specs}

    def test_image_entry_uses_thumbnail_icon(self, app, lifecycle):
        record, _ = lifecycle.capture(CapturedContent.from_pixels(bytes(4 * 10 * 10), 10, 10))
        spec = app._compute_entry_spec(record)
        assert isinstance(spec, MenuItemSpec)
        assert spec.icon == record.thumbnail_path


class TestDrainEvents:
    def test_rebuilds_when_events_arrive(self, app, lifecycle):
        lifecycle.capture(CapturedContent.from_text("hello"))
        app._drain_events(None)
        app._build_menu.assert_called_once()
        assert len(app._view) == 1

    def test_no_rebuild_without_events(self, app):
        app._drain_events(None)
        app._build_menu.assert_not_called()


class TestOnEntryClick:
    def _click(self, app, entry_id, option=False):
        with patch("clipstash.app.NSEvent") as mock_event, \
             patch("clipstash.app.NSAlternateKeyMask", 1), \
             patch("clipstash.app.rumps.notification") as mock_notify:
            mock_event.modifierFlags.return_value = 1 if option else 0
            app._on_entry_click(_sender(entry_id))
        return mock_notify

    def test_text_entry_written_back(self, app, lifecycle):
        record, _ = lifecycle.capture(CapturedContent.from_text("test text"))
        app._drain_events(None)
        app._compute_menu_specs()

        notify = self._click(app, record.id)
        app._pasteboard.write_text.assert_called_once_with("test text")
        notify.assert_called_once()

    def test_image_entry_written_back(self, app, lifecycle):
        record, _ = lifecycle.capture(CapturedContent.from_pixels(bytes(4 * 8 * 8), 8, 8))
        app._drain_events(None)
        app._compute_menu_specs()
        app._pasteboard.write_image_file.return_value = True

        self._click(app, record.id)
        app._pasteboard.write_image_file.assert_called_once_with(lifecycle.paste_payload(record.id))

    def test_option_click_deletes(self, app, lifecycle):
        record, _ = lifecycle.capture(CapturedContent.from_text("bye"))
        app._drain_events(None)
        app._compute_menu_specs()

        self._click(app, record.id, option=True)
        assert lifecycle.records.get_item(record.id) is None
        app._pasteboard.write_text.assert_not_called()

    def test_unknown_sender_returns_early(self, app):
        notify = self._click(app, 12345)
        app._pasteboard.write_text.assert_not_called()
        notify.assert_not_called()


class TestOnDeleteAll:
    def test_confirmed_removes_entries(self, app, lifecycle, clock):
        lifecycle.capture(CapturedContent.from_text("a"))
        lifecycle.capture(CapturedContent.from_text("b"))
        with patch("clipstash.app.rumps.alert", return_value=1), \
             patch("clipstash.app.rumps.notification") as mock_notify:
            app._on_delete_all(None)
        assert lifecycle.records.count() == 0
        assert mock_notify.call_args[0][2] == "Deleted clipboard entries"

    def test_cancelled_keeps_entries(self, app, lifecycle):
        lifecycle.capture(CapturedContent.from_text("keep"))
        with patch("clipstash.app.rumps.alert", return_value=0), \
             patch("clipstash.app.rumps.notification") as mock_notify:
            app._on_delete_all(None)
        assert lifecycle.records.count() == 1
        mock_notify.assert_not_called()

    def test_failure_reported(self, app, lifecycle):
        lifecycle.capture(CapturedContent.from_text("x"))
        app._records.close()
        with patch("clipstash.app.rumps.alert", return_value=1), \
             patch("clipstash.app.rumps.notification") as mock_notify:
            app._on_delete_all(None)
        assert mock_notify.call_args[0][2] == "Failed to delete clipboard entries"
