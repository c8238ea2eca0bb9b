import logging
import threading
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Protocol

from clipstash.config import MAX_TEXT_SIZE, POLL_INTERVAL, PRUNE_INTERVAL, RETENTION
from clipstash.errors import ClipboardUnavailable, ClipstashError
from clipstash.lifecycle import EntryLifecycle
from clipstash.models import AppInfo, CapturedContent, ContentKind
from clipstash.retention import RetentionManager
from clipstash.utils import fingerprint

logger = logging.getLogger(__name__)


class ClipboardReader(Protocol):
    def read(self) -> CapturedContent | None: ...


class AppLookup(Protocol):
    def lookup_foreground_app(self) -> AppInfo | None: ...


class ClipboardMonitor:
    """Polls the clipboard and records each distinct content it sees.

    One tick is ``check_clipboard``; ``start`` runs ticks on a daemon thread
    every ``poll_interval`` seconds until ``stop`` is called.
    """

    def __init__(
        self,
        reader: ClipboardReader,
        lifecycle: EntryLifecycle,
        retention: RetentionManager,
        app_lookup: AppLookup | None = None,
        poll_interval: float = POLL_INTERVAL,
        prune_interval: float = PRUNE_INTERVAL,
        max_age: timedelta = RETENTION,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._reader = reader
        self._lifecycle = lifecycle
        self._retention = retention
        self._app_lookup = app_lookup
        self._poll_interval = poll_interval
        self._prune_interval = prune_interval
        self._max_age = max_age
        self._clock = clock
        self._last_hash: int | None = None
        self._last_prune = clock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def last_hash(self) -> int | None:
        return self._last_hash

    def check_clipboard(self) -> bool:
        """Run one tick. Returns True if an entry was created or updated."""
        self._maybe_prune()

        try:
            content = self._reader.read()
        except ClipboardUnavailable:
            return False
        except ClipstashError:
            logger.exception("Error reading clipboard")
            return False
        if content is None:
            return False

        if content.kind == ContentKind.TEXT:
            size = len(content.text.encode("utf-8"))
            if size > MAX_TEXT_SIZE:
                if self._mark_seen(content):
                    logger.warning("Text too large (%d bytes), skipping", size)
                return False

        if not self._mark_seen(content):
            return False

        try:
            self._lifecycle.capture(content, self._lookup_app())
        except ClipstashError:
            logger.exception("Error recording clipboard entry")
            return False
        return True

    def _mark_seen(self, content: CapturedContent) -> bool:
        new_hash = fingerprint(content.payload)
        if new_hash == self._last_hash:
            return False
        self._last_hash = new_hash
        return True

    def _lookup_app(self) -> AppInfo | None:
        if self._app_lookup is None:
            return None
        try:
            return self._app_lookup.lookup_foreground_app()
        except Exception:
            logger.debug("Foreground application lookup failed", exc_info=True)
            return None

    def _maybe_prune(self) -> None:
        now = self._clock()
        if now - self._last_prune < self._prune_interval:
            return
        self._last_prune = now
        try:
            self._retention.prune(self._max_age)
        except ClipstashError:
            logger.exception("Error pruning clipboard history")

    def run(self) -> None:
        logger.info("Clipboard monitor started (poll every %.1fs)", self._poll_interval)
        while not self._stop_event.is_set():
            self.check_clipboard()
            self._stop_event.wait(self._poll_interval)
        logger.info("Clipboard monitor stopped")

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="clipstash-monitor", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
