import io
import logging
import re
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from clipstash.config import CACHE_DIR, THUMBNAIL_SIZE
from clipstash.errors import AssetIoError, DecodeError

logger = logging.getLogger(__name__)

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


def decode_image(data: bytes) -> tuple[bytes, int, int]:
    """Decode encoded image bytes (PNG, TIFF, ...) into raw RGBA pixels."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"Cannot decode image data ({len(data)} bytes)") from e
    return rgba.tobytes(), rgba.width, rgba.height


class AssetStore:
    """Content-addressed image files for clipboard entries.

    Full images live at ``<cache_dir>/<id>.png`` and thumbnails at
    ``<cache_dir>/<id>.thumb.png``.
    """

    def __init__(self, cache_dir: str | Path | None = None, thumbnail_size: int = THUMBNAIL_SIZE):
        self._cache_dir = Path(cache_dir) if cache_dir else CACHE_DIR
        self._thumbnail_size = thumbnail_size

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def paths_for(self, entry_id: int) -> tuple[Path, Path]:
        return self._cache_dir / f"{entry_id}.png", self._cache_dir / f"{entry_id}.thumb.png"

    def save_image(self, entry_id: int, pixels: bytes, width: int, height: int) -> tuple[Path, Path]:
        expected = width * height * 4
        if width <= 0 or height <= 0 or len(pixels) != expected:
            raise DecodeError(f"Pixel buffer of {len(pixels)} bytes does not match {width}x{height} RGBA")

        try:
            image = Image.frombytes("RGBA", (width, height), pixels)
        except ValueError as e:
            raise DecodeError(str(e)) from e

        full_path, thumb_path = self.paths_for(entry_id)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            image.save(full_path, format="PNG")
            thumb = image.copy()
            thumb.thumbnail((self._thumbnail_size, self._thumbnail_size))
            thumb.save(thumb_path, format="PNG")
        except OSError as e:
            for path in (full_path, thumb_path):
                try:
                    path.unlink(missing_ok=True)
                except OSError:
                    logger.warning("Could not remove partial image file %s", path)
            raise AssetIoError(f"Failed to write image assets for {entry_id}") from e
        return full_path, thumb_path

    def delete_image(self, full_path: str | Path | None, thumbnail_path: str | Path | None) -> None:
        failed: list[str] = []
        for file_path in (full_path, thumbnail_path):
            if not file_path:
                continue
            try:
                Path(file_path).unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not delete %s", file_path)
                failed.append(str(file_path))
        if failed:
            raise AssetIoError(f"Failed to delete {', '.join(failed)}")

    def icon_path(self, name: str) -> Path:
        return self._cache_dir / f"{_UNSAFE_NAME.sub('_', name)}.png"

    def save_app_icon(self, name: str, png_bytes: bytes) -> Path:
        path = self.icon_path(name)
        if path.exists():
            return path
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(png_bytes)
        except OSError as e:
            raise AssetIoError(f"Failed to write icon for {name}") from e
        return path

