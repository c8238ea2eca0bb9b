import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from clipstash.assets import AssetStore
from clipstash.config import UNKNOWN_APPLICATION
from clipstash.errors import AssetIoError, StorageError
from clipstash.models import (
    AppInfo,
    CapturedContent,
    ContentKind,
    DetailRecord,
    ImageContent,
    ListRecord,
    TextContent,
)
from clipstash.notify import Notifier, NullNotifier
from clipstash.storage import RecordStore
from clipstash.utils import count_words, fingerprint, truncate_text, utc_now

logger = logging.getLogger(__name__)


class EntryLifecycle:
    """Create, update and delete entries, keeping records and image files consistent.

    Shared by the capture loop, the retention manager and user-triggered
    deletes so every path goes through the same steps.
    """

    def __init__(
        self,
        records: RecordStore,
        assets: AssetStore,
        notifier: Notifier | None = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self._records = records
        self._assets = assets
        self._notifier = notifier or NullNotifier()
        self._now = now

    @property
    def records(self) -> RecordStore:
        return self._records

    def capture(self, content: CapturedContent, app: AppInfo | None = None) -> tuple[ListRecord, bool]:
        """Record one observation of clipboard content.

        Returns the list record and whether it was newly created. Raises
        StorageError, AssetIoError or DecodeError; nothing is notified then.
        """
        entry_id = fingerprint(content.payload)
        existing = self._records.get_item(entry_id)
        if existing is not None:
            record = self._bump(existing)
            created = False
        else:
            record = self._create(entry_id, content, app)
            created = True
        self._notifier.notify_new_or_updated(record, created)
        return record, created

    def _bump(self, record: ListRecord) -> ListRecord:
        now = self._now()
        updated = replace(
            record,
            copied_last=max(now, record.copied_last),
            copy_count=record.copy_count + 1,
        )
        self._records.upsert_item(updated)
        return updated

    def _create(self, entry_id: int, content: CapturedContent, app: AppInfo | None) -> ListRecord:
        if content.kind == ContentKind.TEXT:
            text = content.text
            title = truncate_text(text)
            detail_content = TextContent(characters=len(text), words=count_words(text), text=text)
            thumbnail = None
        else:
            full_path, thumb_path = self._assets.save_image(entry_id, content.pixels, content.width, content.height)
            title = f"Image ({content.width}x{content.height})"
            detail_content = ImageContent(
                width=content.width,
                height=content.height,
                thumbnail_path=str(thumb_path),
                full_path=str(full_path),
            )
            thumbnail = str(thumb_path)

        now = self._now()
        item = ListRecord(
            id=entry_id,
            title=title,
            copied_first=now,
            copied_last=now,
            kind=content.kind,
            copy_count=1,
            thumbnail_path=thumbnail,
        )
        detail = DetailRecord(
            id=entry_id,
            application=app.name if app else UNKNOWN_APPLICATION,
            application_icon=app.icon_path if app else None,
            content=detail_content,
        )
        try:
            self._records.insert_entry(item, detail)
        except StorageError:
            if isinstance(detail_content, ImageContent):
                self._discard_assets(detail_content.full_path, detail_content.thumbnail_path)
            raise
        return item

    def delete(self, entry_id: int) -> bool:
        """Remove an entry's records and files.

        Each step runs even if an earlier one failed. Returns False if any
        step failed.
        """
        ok = loaded = True
        item = detail = None
        try:
            item = self._records.get_item(entry_id)
            detail = self._records.get_detail(entry_id)
        except StorageError:
            logger.exception("Could not load clipboard entry %s", entry_id)
            ok = loaded = False

        if item is not None:
            kind = item.kind
        elif detail is not None:
            kind = detail.kind
        elif not loaded and self._assets.paths_for(entry_id)[0].exists():
            kind = ContentKind.IMAGE
        else:
            kind = ContentKind.TEXT
        self._notifier.notify_removed(kind, entry_id)

        try:
            self._records.delete_detail(entry_id)
        except StorageError:
            logger.exception("Could not delete detail record %s", entry_id)
            ok = False
        try:
            self._records.delete_item(entry_id)
        except StorageError:
            logger.exception("Could not delete list record %s", entry_id)
            ok = False

        # With the records unreadable, files may still exist at the canonical paths
        if kind == ContentKind.IMAGE or not loaded:
            full_path, thumb_path = self._image_paths(entry_id, item, detail)
            ok = self._discard_assets(full_path, thumb_path) and ok
        return ok

    def _image_paths(self, entry_id: int, item: ListRecord | None, detail: DetailRecord | None):
        if detail is not None and isinstance(detail.content, ImageContent):
            return detail.content.full_path, detail.content.thumbnail_path
        full_path, thumb_path = self._assets.paths_for(entry_id)
        if item is not None and item.thumbnail_path:
            thumb_path = item.thumbnail_path
        return full_path, thumb_path

    def _discard_assets(self, full_path, thumb_path) -> bool:
        try:
            self._assets.delete_image(full_path, thumb_path)
        except AssetIoError:
            logger.exception("Could not delete image files %s, %s", full_path, thumb_path)
            return False
        return True

    def paste_payload(self, entry_id: int) -> str | None:
        """Text to paste, or the full image path, for an entry."""
        detail = self._records.get_detail(entry_id)
        if detail is None:
            return None
        if isinstance(detail.content, TextContent):
            return detail.content.text
        return detail.content.full_path
