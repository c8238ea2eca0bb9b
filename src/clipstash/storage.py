import sqlite3
import threading
from datetime import datetime
from pathlib import Path

from clipstash.config import DB_PATH
from clipstash.errors import StorageError
from clipstash.models import ContentKind, DetailRecord, ImageContent, ListRecord, TextContent
from clipstash.utils import from_sql_id, to_sql_id


SCHEMA = """
CREATE TABLE IF NOT EXISTS clipboard_item (
    id             INTEGER PRIMARY KEY,
    title          TEXT NOT NULL,
    copied_first   TEXT NOT NULL,
    copied_last    TEXT NOT NULL,
    kind           TEXT NOT NULL CHECK(kind IN ('text', 'image')),
    copy_count     INTEGER NOT NULL DEFAULT 1 CHECK(copy_count >= 1),
    thumbnail_path TEXT
);

CREATE INDEX IF NOT EXISTS idx_copied_last ON clipboard_item(copied_last DESC);

CREATE TABLE IF NOT EXISTS clipboard_detail (
    id               INTEGER PRIMARY KEY,
    application      TEXT NOT NULL,
    application_icon TEXT,
    kind             TEXT NOT NULL CHECK(kind IN ('text', 'image')),
    characters       INTEGER,
    words            INTEGER,
    text_content     TEXT,
    width            INTEGER,
    height           INTEGER,
    thumbnail_path   TEXT,
    full_path        TEXT
);
"""


class RecordStore:
    """SQLite storage for list and detail records, keyed by fingerprint."""

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = str(db_path) if db_path else str(DB_PATH)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self.init_db()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self._db_path}: {e}") from e

    def init_db(self) -> None:
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    def _execute(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                with self._conn:
                    rows = self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e
        return rows

    def get_item(self, entry_id: int) -> ListRecord | None:
        rows = self._execute("SELECT * FROM clipboard_item WHERE id = ?", (to_sql_id(entry_id),))
        return self._row_to_item(rows[0]) if rows else None

    def get_detail(self, entry_id: int) -> DetailRecord | None:
        rows = self._execute("SELECT * FROM clipboard_detail WHERE id = ?", (to_sql_id(entry_id),))
        return self._row_to_detail(rows[0]) if rows else None

    def upsert_item(self, record: ListRecord) -> None:
        self._execute(*self._item_upsert(record))

    def upsert_detail(self, record: DetailRecord) -> None:
        self._execute(*self._detail_upsert(record))

    def insert_entry(self, item: ListRecord, detail: DetailRecord) -> None:
        """Write both records of a new entry in one transaction."""
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(*self._item_upsert(item))
                    self._conn.execute(*self._detail_upsert(detail))
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e

    def delete_item(self, entry_id: int) -> None:
        self._execute("DELETE FROM clipboard_item WHERE id = ?", (to_sql_id(entry_id),))

    def delete_detail(self, entry_id: int) -> None:
        self._execute("DELETE FROM clipboard_detail WHERE id = ?", (to_sql_id(entry_id),))

    def scan_items(self) -> list[ListRecord]:
        return [self._row_to_item(r) for r in self._execute("SELECT * FROM clipboard_item")]

    def scan_details(self) -> list[DetailRecord]:
        return [self._row_to_detail(r) for r in self._execute("SELECT * FROM clipboard_detail")]

    def get_recent(self, limit: int = 25) -> list[ListRecord]:
        rows = self._execute(
            "SELECT * FROM clipboard_item ORDER BY copied_last DESC LIMIT ?",
            (limit,),
        )
        return [self._row_to_item(r) for r in rows]

    def count(self) -> int:
        row = self._execute("SELECT COUNT(*) as cnt FROM clipboard_item")[0]
        return row["cnt"]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @staticmethod
    def _item_upsert(record: ListRecord) -> tuple[str, tuple]:
        return (
            """INSERT INTO clipboard_item
               (id, title, copied_first, copied_last, kind, copy_count, thumbnail_path)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   title = excluded.title,
                   copied_first = excluded.copied_first,
                   copied_last = excluded.copied_last,
                   kind = excluded.kind,
                   copy_count = excluded.copy_count,
                   thumbnail_path = excluded.thumbnail_path""",
            (
                to_sql_id(record.id),
                record.title,
                record.copied_first.isoformat(),
                record.copied_last.isoformat(),
                record.kind.value,
                record.copy_count,
                record.thumbnail_path,
            ),
        )

    @staticmethod
    def _detail_upsert(record: DetailRecord) -> tuple[str, tuple]:
        content = record.content
        text_fields = (None, None, None)
        image_fields = (None, None, None, None)
        if isinstance(content, TextContent):
            text_fields = (content.characters, content.words, content.text)
        else:
            image_fields = (content.width, content.height, content.thumbnail_path, content.full_path)
        return (
            """INSERT OR REPLACE INTO clipboard_detail
               (id, application, application_icon, kind, characters, words, text_content,
                width, height, thumbnail_path, full_path)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                to_sql_id(record.id),
                record.application,
                record.application_icon,
                content.kind.value,
                *text_fields,
                *image_fields,
            ),
        )

    def _row_to_item(self, row: sqlite3.Row) -> ListRecord:
        return ListRecord(
            id=from_sql_id(row["id"]),
            title=row["title"],
            copied_first=datetime.fromisoformat(row["copied_first"]),
            copied_last=datetime.fromisoformat(row["copied_last"]),
            kind=ContentKind(row["kind"]),
            copy_count=row["copy_count"],
            thumbnail_path=row["thumbnail_path"],
        )

    def _row_to_detail(self, row: sqlite3.Row) -> DetailRecord:
        if ContentKind(row["kind"]) == ContentKind.TEXT:
            content = TextContent(characters=row["characters"], words=row["words"], text=row["text_content"])
        else:
            content = ImageContent(
                width=row["width"],
                height=row["height"],
                thumbnail_path=row["thumbnail_path"],
                full_path=row["full_path"],
            )
        return DetailRecord(
            id=from_sql_id(row["id"]),
            application=row["application"],
            application_icon=row["application_icon"],
            content=content,
        )
