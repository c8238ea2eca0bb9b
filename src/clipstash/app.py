import logging
from dataclasses import dataclass
from typing import Callable

import rumps
from AppKit import NSAlternateKeyMask, NSEvent

from clipstash import __version__
from clipstash.assets import AssetStore
from clipstash.config import CACHE_DIR, DB_PATH, MENU_DISPLAY_COUNT, THUMBNAIL_SIZE
from clipstash.errors import StorageError
from clipstash.lifecycle import EntryLifecycle
from clipstash.models import ContentKind, ListRecord
from clipstash.monitor import ClipboardMonitor
from clipstash.notify import QueueNotifier
from clipstash.pasteboard import FrontmostAppLookup, MacPasteboard
from clipstash.retention import RetentionManager
from clipstash.storage import RecordStore
from clipstash.utils import ensure_dirs
from clipstash.view import HistoryView

logger = logging.getLogger(__name__)

ENTRY_KEY_PREFIX = "clipstash_entry_"
EVENT_DRAIN_INTERVAL = 0.5  # seconds


@dataclass
class MenuItemSpec:
    """Specification for a menu item, separating logic from rumps rendering."""

    title: str
    callback: Callable | None = None
    icon: str | None = None
    entry_id: int | None = None


class ClipstashApp(rumps.App):
    def __init__(self):
        super().__init__("Clipstash", title="📋", quit_button=None)
        self._init_app()

    def _init_app(self) -> None:
        ensure_dirs()
        self._records = RecordStore(DB_PATH)
        self._assets = AssetStore(CACHE_DIR, THUMBNAIL_SIZE)
        self._notifier = QueueNotifier()
        self._lifecycle = EntryLifecycle(self._records, self._assets, self._notifier)
        self._retention = RetentionManager(self._lifecycle)
        self._pasteboard = MacPasteboard()
        self._monitor = ClipboardMonitor(
            self._pasteboard,
            self._lifecycle,
            self._retention,
            app_lookup=FrontmostAppLookup(self._assets),
        )
        self._view = HistoryView(self._records.scan_items())
        self._entry_ids: dict[str, int] = {}
        self._build_menu()
        self._monitor.start()

    def _build_menu(self) -> None:
        self.menu.clear()
        self._entry_ids.clear()
        self.menu = [self._render_spec(spec) for spec in self._compute_menu_specs()]

    def _compute_menu_specs(self) -> list[MenuItemSpec | None]:
        specs: list[MenuItemSpec | None] = [
            MenuItemSpec(f"Clipstash v{__version__} - Clipboard History"),
            None,
        ]

        entries = self._view.entries(limit=MENU_DISPLAY_COUNT)
        if not entries:
            specs.append(MenuItemSpec("(No clipboard history)"))
        for record in entries:
            specs.append(self._compute_entry_spec(record))

        specs.extend([
            None,
            MenuItemSpec("Delete All", callback=self._on_delete_all),
            None,
            MenuItemSpec("Quit Clipstash", callback=self._on_quit),
        ])
        return specs

    def _compute_entry_spec(self, record: ListRecord) -> MenuItemSpec:
        self._entry_ids[f"{ENTRY_KEY_PREFIX}{record.id}"] = record.id
        spec = MenuItemSpec(title=record.title, callback=self._on_entry_click, entry_id=record.id)
        if record.kind == ContentKind.IMAGE and record.thumbnail_path:
            spec.icon = record.thumbnail_path
        return spec

    def _render_spec(self, spec: MenuItemSpec | None) -> rumps.MenuItem | None:
        if spec is None:
            return None
        kwargs = {"callback": spec.callback}
        if spec.icon:
            kwargs.update(icon=spec.icon, dimensions=(32, 32), template=False)
        item = rumps.MenuItem(spec.title, **kwargs)
        if spec.entry_id is not None:
            item._id = f"{ENTRY_KEY_PREFIX}{spec.entry_id}"
        return item

    @rumps.timer(EVENT_DRAIN_INTERVAL)
    def _drain_events(self, _sender) -> None:
        if self._view.apply(self._notifier.drain()):
            self._build_menu()

    def _on_entry_click(self, sender) -> None:
        entry_id = self._entry_ids.get(getattr(sender, "_id", ""))
        if entry_id is None:
            return

        # Option-click deletes the entry
        if NSEvent.modifierFlags() & NSAlternateKeyMask:
            self._on_delete(entry_id)
            return

        try:
            record = self._view.get(entry_id)
            payload = self._lifecycle.paste_payload(entry_id)
            if record is None or payload is None:
                return
            if record.kind == ContentKind.TEXT:
                self._pasteboard.write_text(payload)
            elif not self._pasteboard.write_image_file(payload):
                return
            rumps.notification("Clipstash", "", "Copied to clipboard", sound=False)
        except Exception:
            logger.exception("Error copying entry to clipboard")

    def _on_delete(self, entry_id: int) -> None:
        if self._lifecycle.delete(entry_id):
            rumps.notification("Clipstash", "", "Deleted clipboard entry", sound=False)
        else:
            rumps.notification("Clipstash", "", "Failed to delete clipboard entry", sound=False)

    def _on_delete_all(self, _sender) -> None:
        if not rumps.alert("Clipstash", "Delete all clipboard history?", ok="Delete", cancel="Cancel"):
            return
        try:
            ok = self._retention.delete_all().ok
        except StorageError:
            logger.exception("Error deleting clipboard history")
            ok = False
        message = "Deleted clipboard entries" if ok else "Failed to delete clipboard entries"
        rumps.notification("Clipstash", "", message, sound=False)

    def _on_quit(self, _sender) -> None:
        self._monitor.stop(timeout=2.0)
        self._records.close()
        rumps.quit_application()
