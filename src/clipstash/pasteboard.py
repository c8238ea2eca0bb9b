"""macOS clipboard and frontmost-application adapters (AppKit)."""
import logging

from AppKit import (
    NSBitmapImageRep,
    NSPasteboard,
    NSPasteboardTypePNG,
    NSPasteboardTypeString,
    NSPasteboardTypeTIFF,
    NSWorkspace,
)
from Foundation import NSData

from clipstash.assets import AssetStore, decode_image
from clipstash.config import MAX_IMAGE_SIZE
from clipstash.errors import AssetIoError, ClipboardUnavailable
from clipstash.models import AppInfo, CapturedContent

logger = logging.getLogger(__name__)

PNG_FILE_TYPE = 4  # NSBitmapImageFileTypePNG


class MacPasteboard:
    """Reads and writes the general pasteboard.

    Decoded images are cached per pasteboard change count so a still-present
    image is not decoded again on every tick.
    """

    def __init__(self):
        self._pasteboard = NSPasteboard.generalPasteboard()
        self._cached_count: int | None = None
        self._cached_image: CapturedContent | None = None

    def read(self) -> CapturedContent | None:
        types = self._pasteboard.types()
        if types is None:
            raise ClipboardUnavailable("Pasteboard has no types")

        if NSPasteboardTypeString in types:
            text = self._pasteboard.stringForType_(NSPasteboardTypeString)
            if text:
                return CapturedContent.from_text(str(text))

        for img_type in (NSPasteboardTypePNG, NSPasteboardTypeTIFF):
            if img_type in types:
                return self._read_image(img_type)

        return None

    def _read_image(self, img_type) -> CapturedContent | None:
        count = self._pasteboard.changeCount()
        if count == self._cached_count:
            return self._cached_image

        self._cached_count = count
        self._cached_image = None
        data = self._pasteboard.dataForType_(img_type)
        if data is None:
            return None
        pixels, width, height = decode_image(bytes(data))
        if len(pixels) > MAX_IMAGE_SIZE:
            logger.warning("Image too large (%dx%d), skipping", width, height)
            return None
        self._cached_image = CapturedContent.from_pixels(pixels, width, height)
        return self._cached_image

    def write_text(self, text: str) -> None:
        self._pasteboard.clearContents()
        self._pasteboard.setString_forType_(text, NSPasteboardTypeString)

    def write_image_file(self, path: str) -> bool:
        img_data = NSData.dataWithContentsOfFile_(path)
        if not img_data:
            return False
        self._pasteboard.clearContents()
        self._pasteboard.setData_forType_(img_data, NSPasteboardTypePNG)
        return True


class FrontmostAppLookup:
    """Best-effort name and icon of the application owning the focus."""

    def __init__(self, assets: AssetStore):
        self._assets = assets

    def lookup_foreground_app(self) -> AppInfo | None:
        app = NSWorkspace.sharedWorkspace().frontmostApplication()
        if app is None:
            return None
        name = app.localizedName()
        if not name:
            return None
        key = app.bundleIdentifier() or str(name)
        return AppInfo(name=str(name), icon_path=self._icon_path(str(key), app.icon()))

    def _icon_path(self, key: str, icon) -> str | None:
        existing = self._assets.icon_path(key)
        if existing.exists():
            return str(existing)
        if icon is None:
            return None

        tiff_data = icon.TIFFRepresentation()
        if not tiff_data:
            return None
        bitmap_rep = NSBitmapImageRep.imageRepWithData_(tiff_data)
        if not bitmap_rep:
            return None
        png_data = bitmap_rep.representationUsingType_properties_(PNG_FILE_TYPE, None)
        if not png_data:
            return None

        try:
            return str(self._assets.save_app_icon(key, bytes(png_data)))
        except AssetIoError:
            logger.warning("Could not cache icon for %s", key)
            return None
