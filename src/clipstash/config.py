import os
from datetime import timedelta
from pathlib import Path

DATA_DIR = Path(os.environ.get("CLIPSTASH_DATA_DIR", Path.home() / ".local" / "share" / "clipstash"))
DB_PATH = DATA_DIR / "clipstash.db"
CACHE_DIR = DATA_DIR / "cache" / "clipboard"
LOG_PATH = DATA_DIR / "clipstash.log"


def _parse_env_number(name: str, default, minimum, maximum, cast=int):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _parse_menu_display_count() -> int:
    return _parse_env_number("CLIPSTASH_MENU_DISPLAY_COUNT", 10, 5, 50)


POLL_INTERVAL = _parse_env_number("CLIPSTASH_POLL_INTERVAL", 1.0, 0.1, 60.0, cast=float)  # seconds between ticks
PRUNE_INTERVAL = _parse_env_number("CLIPSTASH_PRUNE_INTERVAL", 3600, 60, 86400)  # seconds between prunes
RETENTION = timedelta(days=_parse_env_number("CLIPSTASH_RETENTION_DAYS", 7, 0, 3650))
THUMBNAIL_SIZE = _parse_env_number("CLIPSTASH_THUMBNAIL_SIZE", 64, 16, 512)  # max edge in pixels
MENU_DISPLAY_COUNT = _parse_menu_display_count()

TITLE_LENGTH = 25  # characters before the ellipsis
MAX_TEXT_SIZE = 1_000_000  # 1MB text limit
MAX_IMAGE_SIZE = 64_000_000  # raw RGBA bytes, roughly 4K x 4K
UNKNOWN_APPLICATION = "Unknown"
