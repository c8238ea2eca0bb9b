"""Fire-and-forget change notifications from the engine to the UI."""
import logging
import queue
from typing import Protocol

from clipstash.models import ContentKind, EntryAction, EntryEvent, ListRecord

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify_new_or_updated(self, record: ListRecord, created: bool = True) -> None: ...

    def notify_removed(self, kind: ContentKind, entry_id: int) -> None: ...


class NullNotifier:
    def notify_new_or_updated(self, record: ListRecord, created: bool = True) -> None:
        pass

    def notify_removed(self, kind: ContentKind, entry_id: int) -> None:
        pass


class QueueNotifier:
    """Posts EntryEvents to an unbounded queue drained by the UI thread.

    Posting never blocks, so the capture thread cannot be held up by the UI.
    """

    def __init__(self):
        self._events: queue.SimpleQueue[EntryEvent] = queue.SimpleQueue()

    def notify_new_or_updated(self, record: ListRecord, created: bool = True) -> None:
        action = EntryAction.ADDED if created else EntryAction.UPDATED
        self._events.put(EntryEvent(action=action, kind=record.kind, id=record.id, record=record))

    def notify_removed(self, kind: ContentKind, entry_id: int) -> None:
        self._events.put(EntryEvent(action=EntryAction.REMOVED, kind=kind, id=entry_id))

    def drain(self, max_events: int | None = None) -> list[EntryEvent]:
        events: list[EntryEvent] = []
        while max_events is None or len(events) < max_events:
            try:
                events.append(self._events.get_nowait())
            except queue.Empty:
                break
        if events:
            logger.debug("Drained %d clipboard events", len(events))
        return events
