import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from clipstash.lifecycle import EntryLifecycle
from clipstash.utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PruneResult:
    deleted: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0


class RetentionManager:
    def __init__(self, lifecycle: EntryLifecycle, now: Callable[[], datetime] = utc_now):
        self._lifecycle = lifecycle
        self._now = now

    def prune(self, max_age: timedelta) -> PruneResult:
        """Delete every entry last copied more than ``max_age`` ago.

        A zero or negative age deletes everything. Raises StorageError if the
        records cannot be scanned.
        """
        cutoff = self._now() - max_age
        delete_all = max_age <= timedelta(0)
        deleted = failed = 0
        for record in self._lifecycle.records.scan_items():
            if not delete_all and record.copied_last >= cutoff:
                continue
            if self._lifecycle.delete(record.id):
                deleted += 1
            else:
                failed += 1

        if deleted or failed:
            logger.info("Pruned %d clipboard entries (%d failed)", deleted, failed)
        return PruneResult(deleted=deleted, failed=failed)

    def delete_all(self) -> PruneResult:
        return self.prune(timedelta(0))
