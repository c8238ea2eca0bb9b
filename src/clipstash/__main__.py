import argparse
import logging
import sys
from datetime import datetime, timedelta

from clipstash.assets import AssetStore
from clipstash.config import CACHE_DIR, DATA_DIR, DB_PATH, LOG_PATH, RETENTION
from clipstash.errors import StorageError
from clipstash.lifecycle import EntryLifecycle
from clipstash.models import ImageContent
from clipstash.retention import RetentionManager
from clipstash.storage import RecordStore
from clipstash.utils import ensure_dirs

TIME_FORMAT = "%Y/%m/%d %H:%M:%S"


def _local_time(value: datetime) -> str:
    return value.astimezone().strftime(TIME_FORMAT)


def _open_engine() -> tuple[RecordStore, RetentionManager]:
    records = RecordStore(DB_PATH)
    lifecycle = EntryLifecycle(records, AssetStore(CACHE_DIR))
    return records, RetentionManager(lifecycle)


def list_entries(limit: int) -> int:
    """Print the most recently copied entries."""
    ensure_dirs()
    try:
        with RecordStore(DB_PATH) as records:
            entries = records.get_recent(limit)
    except StorageError as e:
        print(f"Failed to read clipboard history: {e}")
        return 1

    if not entries:
        print("(No clipboard history)")
    for record in entries:
        print(
            f"{record.id:>20}  {_local_time(record.copied_last)}  "
            f"x{record.copy_count:<3} {record.kind.value:<5}  {record.title}"
        )
    return 0


def show_entry(entry_id: int) -> int:
    """Print everything stored about one entry."""
    ensure_dirs()
    try:
        with RecordStore(DB_PATH) as records:
            item = records.get_item(entry_id)
            detail = records.get_detail(entry_id)
    except StorageError as e:
        print(f"Failed to read clipboard history: {e}")
        return 1

    if item is None or detail is None:
        print(f"No clipboard entry {entry_id}")
        return 1

    content = detail.content
    lines = [
        ("Title", item.title),
        ("Application", detail.application),
        ("First copied", _local_time(item.copied_first)),
        ("Last copied", _local_time(item.copied_last)),
        ("Times copied", str(item.copy_count)),
        ("Type", item.kind.value),
    ]
    if isinstance(content, ImageContent):
        lines.append(("Dimensions", f"{content.width}x{content.height}"))
        lines.append(("Image", content.full_path))
    else:
        lines.append(("Characters", str(content.characters)))
        lines.append(("Words", str(content.words)))

    for label, value in lines:
        print(f"{label + ':':<14}{value}")
    if not isinstance(content, ImageContent):
        print()
        print(content.text)
    return 0


def prune_entries(max_age: timedelta) -> int:
    """Delete entries older than ``max_age`` (everything when zero)."""
    ensure_dirs()
    try:
        records, retention = _open_engine()
        with records:
            result = retention.prune(max_age)
    except StorageError as e:
        print(f"Failed to delete clipboard entries: {e}")
        return 1

    if not result.ok:
        print(f"Deleted {result.deleted} entries, {result.failed} failed.")
        return 1
    print(f"Deleted {result.deleted} entries.")
    return 0


def run_app():
    """Run the Clipstash menu bar application."""
    ensure_dirs()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_PATH),
            logging.StreamHandler(sys.stderr),
        ],
    )

    from clipstash.app import ClipstashApp

    app = ClipstashApp()
    app.run()


def main():
    parser = argparse.ArgumentParser(
        description="Clipstash - clipboard history engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Commands:
  run         Run Clipstash in foreground (default)
  list        Show recent clipboard entries with their ids
  show ID     Show the stored details of one entry
  prune       Delete entries older than the retention window
  clear       Delete all clipboard entries

Data directory: {DATA_DIR}
""",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=["run", "list", "show", "prune", "clear"],
        help="Command to run",
    )
    parser.add_argument("entry_id", nargs="?", type=int, help="entry id for 'show'")
    parser.add_argument("-n", "--limit", type=int, default=25, help="entries to show with 'list'")
    parser.add_argument(
        "--days",
        type=float,
        default=RETENTION.total_seconds() / 86400,
        help="retention window in days for 'prune'",
    )

    args = parser.parse_args()

    if args.command == "list":
        sys.exit(list_entries(args.limit))
    elif args.command == "show":
        if args.entry_id is None:
            parser.error("'show' needs an entry id (see 'clipstash list')")
        sys.exit(show_entry(args.entry_id))
    elif args.command == "prune":
        sys.exit(prune_entries(timedelta(days=args.days)))
    elif args.command == "clear":
        sys.exit(prune_entries(timedelta(0)))
    else:
        run_app()


if __name__ == "__main__":
    main()
