from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ContentKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class EntryAction(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True)
class TextContent:
    characters: int
    words: int
    text: str

    kind = ContentKind.TEXT


@dataclass(frozen=True)
class ImageContent:
    width: int
    height: int
    thumbnail_path: str
    full_path: str

    kind = ContentKind.IMAGE


Content = TextContent | ImageContent


@dataclass
class ListRecord:
    """Lightweight entry metadata shown in the history list."""

    id: int
    title: str
    copied_first: datetime
    copied_last: datetime
    kind: ContentKind
    copy_count: int = 1
    thumbnail_path: str | None = None


@dataclass
class DetailRecord:
    """Heavier per-entry data, loaded when an entry is opened or pasted."""

    id: int
    application: str
    content: Content
    application_icon: str | None = None

    @property
    def kind(self) -> ContentKind:
        return self.content.kind


@dataclass(frozen=True)
class CapturedContent:
    """Raw content read from the clipboard in one tick."""

    kind: ContentKind
    text: str | None = None
    pixels: bytes | None = None
    width: int = 0
    height: int = 0

    @classmethod
    def from_text(cls, text: str) -> "CapturedContent":
        return cls(kind=ContentKind.TEXT, text=text)

    @classmethod
    def from_pixels(cls, pixels: bytes, width: int, height: int) -> "CapturedContent":
        return cls(kind=ContentKind.IMAGE, pixels=pixels, width=width, height=height)

    @property
    def payload(self) -> str | bytes:
        return self.text if self.kind == ContentKind.TEXT else self.pixels


@dataclass(frozen=True)
class AppInfo:
    name: str
    icon_path: str | None = None


@dataclass(frozen=True)
class EntryEvent:
    action: EntryAction
    kind: ContentKind
    id: int
    record: ListRecord | None = None
