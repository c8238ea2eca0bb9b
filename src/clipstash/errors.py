"""Error kinds raised by the capture engine."""


class ClipstashError(Exception):
    """Base class for clipstash errors."""


class ClipboardUnavailable(ClipstashError):
    """No usable clipboard content this tick. Not a failure."""


class StorageError(ClipstashError):
    """A record read or write failed."""


class AssetIoError(ClipstashError):
    """Writing or deleting an image or thumbnail file failed."""


class DecodeError(ClipstashError):
    """Image data could not be decoded into pixels."""
