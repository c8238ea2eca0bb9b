from datetime import timedelta
from unittest.mock import patch

import pytest

from clipstash.errors import StorageError
from clipstash.models import CapturedContent


def _capture_at(lifecycle, clock, text, age):
    clock.advance(**{k: -v for k, v in age.items()})
    record, _ = lifecycle.capture(CapturedContent.from_text(text))
    clock.advance(**age)
    return record


class TestPrune:
    def test_removes_old_keeps_recent(self, lifecycle, retention, records, clock):
        old = _capture_at(lifecycle, clock, "old", {"days": 8})
        recent = _capture_at(lifecycle, clock, "recent", {"days": 6})

        result = retention.prune(timedelta(days=7))

        assert result.deleted == 1
        assert result.ok
        assert records.get_item(old.id) is None
        assert records.get_detail(old.id) is None
        assert records.get_item(recent.id) is not None

    def test_recopy_extends_lifetime(self, lifecycle, retention, records, clock):
        record = _capture_at(lifecycle, clock, "A", {"days": 10})
        clock.advance(days=-1)
        lifecycle.capture(CapturedContent.from_text("A"))
        clock.advance(days=1)

        assert retention.prune(timedelta(days=7)).deleted == 0
        assert records.get_item(record.id).copy_count == 2

    def test_nothing_to_prune(self, retention):
        result = retention.prune(timedelta(days=7))
        assert result.deleted == 0
        assert result.ok


class TestDeleteAll:
    def test_prune_zero_removes_everything(self, lifecycle, retention, records, assets, clock):
        lifecycle.capture(CapturedContent.from_text("now"))
        _capture_at(lifecycle, clock, "week old", {"days": 7})
        lifecycle.capture(CapturedContent.from_pixels(b"\x01\x02\x03\x04" * 100, 10, 10))

        result = retention.prune(timedelta(0))

        assert result.deleted == 3
        assert records.count() == 0
        assert records.scan_details() == []
        assert list(assets.cache_dir.glob("*.png")) == []

    def test_delete_all(self, lifecycle, retention, records):
        lifecycle.capture(CapturedContent.from_text("a"))
        lifecycle.capture(CapturedContent.from_text("b"))
        assert retention.delete_all().deleted == 2
        assert records.count() == 0

    def test_failures_are_aggregated(self, lifecycle, retention, records):
        lifecycle.capture(CapturedContent.from_text("a"))
        with patch.object(records, "delete_item", side_effect=StorageError("locked")):
            result = retention.delete_all()
        assert result.failed == 1
        assert not result.ok

    def test_scan_failure_propagates(self, retention, records):
        with patch.object(records, "scan_items", side_effect=StorageError("corrupt")):
            with pytest.raises(StorageError):
                retention.delete_all()
