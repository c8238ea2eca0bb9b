from clipstash.models import EntryAction, EntryEvent, ListRecord


class HistoryView:
    """UI-side mirror of the list records, kept current from EntryEvents."""

    def __init__(self, records: list[ListRecord] | None = None):
        self._records: dict[int, ListRecord] = {r.id: r for r in records or []}

    def apply(self, events: list[EntryEvent]) -> bool:
        """Apply events in order. Returns True if anything changed."""
        changed = False
        for event in events:
            if event.action == EntryAction.REMOVED:
                changed = self._records.pop(event.id, None) is not None or changed
            elif event.record is not None:
                self._records[event.id] = event.record
                changed = True
        return changed

    def entries(self, limit: int | None = None) -> list[ListRecord]:
        ordered = sorted(self._records.values(), key=lambda r: r.copied_last, reverse=True)
        return ordered if limit is None else ordered[:limit]

    def get(self, entry_id: int) -> ListRecord | None:
        return self._records.get(entry_id)

    def __len__(self) -> int:
        return len(self._records)
