import hashlib
from datetime import datetime, timezone

from clipstash.config import CACHE_DIR, DATA_DIR, TITLE_LENGTH

_SQLITE_INT_LIMIT = 1 << 63
_U64 = 1 << 64


def fingerprint(data: str | bytes) -> int:
    """Stable 64-bit content fingerprint.

    Unkeyed BLAKE2b truncated to 8 bytes, so the value is identical across
    processes and can be used as a durable id.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    digest = hashlib.blake2b(data, digest_size=8).digest()
    return int.from_bytes(digest, "big")


def to_sql_id(entry_id: int) -> int:
    # SQLite integers are signed 64-bit
    return entry_id - _U64 if entry_id >= _SQLITE_INT_LIMIT else entry_id


def from_sql_id(value: int) -> int:
    return value + _U64 if value < 0 else value


def truncate_text(text: str, max_len: int = TITLE_LENGTH) -> str:
    single_line = " ".join(text.split())
    if len(single_line) <= max_len:
        return single_line
    return single_line[:max_len] + "..."


def count_words(text: str) -> int:
    return len(text.split())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    CACHE_DIR.mkdir(parents=True, exist_ok=True)
