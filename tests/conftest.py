from datetime import datetime, timedelta, timezone

import pytest

from clipstash.assets import AssetStore
from clipstash.lifecycle import EntryLifecycle
from clipstash.models import CapturedContent, ContentKind, DetailRecord, ImageContent, ListRecord, TextContent
from clipstash.notify import QueueNotifier
from clipstash.retention import RetentionManager
from clipstash.storage import RecordStore


class FakeClock:
    """Controllable UTC wall clock."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeReader:
    """Clipboard reader returning whatever ``content`` is set to."""

    def __init__(self):
        self.content: CapturedContent | None = None
        self.error: Exception | None = None
        self.reads = 0

    def read(self) -> CapturedContent | None:
        self.reads += 1
        if self.error is not None:
            raise self.error
        return self.content

    def set_text(self, text: str) -> None:
        self.content = CapturedContent.from_text(text)

    def set_image(self, width: int, height: int, color: tuple[int, int, int, int] = (255, 0, 0, 255)) -> None:
        self.content = CapturedContent.from_pixels(bytes(color) * (width * height), width, height)


@pytest.fixture
def records():
    store = RecordStore(db_path=":memory:")
    yield store
    store.close()


@pytest.fixture
def assets(tmp_path):
    return AssetStore(tmp_path / "cache" / "clipboard", thumbnail_size=64)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return QueueNotifier()


@pytest.fixture
def lifecycle(records, assets, notifier, clock):
    return EntryLifecycle(records, assets, notifier, now=clock)


@pytest.fixture
def retention(lifecycle, clock):
    return RetentionManager(lifecycle, now=clock)


@pytest.fixture
def reader():
    return FakeReader()


@pytest.fixture
def make_entry(clock):
    """Factory fixture building matching list and detail records."""

    def _make_entry(
        entry_id: int = 1,
        text: str = "hello world",
        kind: ContentKind = ContentKind.TEXT,
        copied_last: datetime | None = None,
        full_path: str = "/tmp/test.png",
        thumbnail_path: str = "/tmp/test.thumb.png",
    ) -> tuple[ListRecord, DetailRecord]:
        copied = copied_last or clock()
        if kind == ContentKind.IMAGE:
            content = ImageContent(width=100, height=50, thumbnail_path=thumbnail_path, full_path=full_path)
            title = "Image (100x50)"
            thumb = thumbnail_path
        else:
            content = TextContent(characters=len(text), words=len(text.split()), text=text)
            title = text[:25]
            thumb = None
        item = ListRecord(
            id=entry_id,
            title=title,
            copied_first=copied,
            copied_last=copied,
            kind=kind,
            copy_count=1,
            thumbnail_path=thumb,
        )
        detail = DetailRecord(id=entry_id, application="Terminal", content=content)
        return item, detail

    return _make_entry
