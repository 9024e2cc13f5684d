"""Content-type to human-readable format label."""

from types import MappingProxyType
from typing import Mapping

DEFAULT_MIME_TYPE_LABELS: Mapping[str, str] = MappingProxyType({
    # Documents
    "application/pdf": "PDF",
    "application/msword": "Word",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "Word",
    "application/vnd.ms-excel": "Excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "Excel",
    "application/vnd.ms-powerpoint": "PowerPoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "PowerPoint",
    "application/vnd.oasis.opendocument.text": "OpenDocument Text",
    "application/vnd.oasis.opendocument.spreadsheet": "OpenDocument Spreadsheet",
    "application/rtf": "RTF",
    "text/plain": "Text",
    "text/csv": "CSV",
    "text/html": "HTML",
    "text/markdown": "Markdown",
    "application/json": "JSON",
    "application/xml": "XML",
    "text/xml": "XML",
    # Images
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WebP",
    "image/svg+xml": "SVG",
    "image/bmp": "BMP",
    "image/tiff": "TIFF",
    "image/heic": "HEIC",
    # Audio / video
    "audio/mpeg": "MP3",
    "audio/wav": "WAV",
    "audio/ogg": "OGG",
    "video/mp4": "MP4",
    "video/quicktime": "QuickTime",
    "video/x-msvideo": "AVI",
    "video/webm": "WebM",
    # Archives
    "application/zip": "ZIP",
    "application/x-zip-compressed": "ZIP",
    "application/x-7z-compressed": "7-Zip",
    "application/x-rar-compressed": "RAR",
    "application/vnd.rar": "RAR",
    "application/gzip": "GZIP",
    "application/x-tar": "TAR",
    # Other
    "application/octet-stream": "Binary",
})


class FormatClassifier:
    """Maps a content type to a short label via an injected, read-only table.

    Lookups are case-insensitive. Types missing from the table fall back to
    their subtype as written, so ``application/X-Foo`` becomes ``X-Foo``.
    Never fails.
    """

    def __init__(self, table: Mapping[str, str] = DEFAULT_MIME_TYPE_LABELS):
        self.table = MappingProxyType({key.lower(): label for key, label in table.items()})

    def classify(self, content_type: str) -> str:
        # "text/plain; charset=utf-8" -> "text/plain"
        mime_type = content_type.split(";", 1)[0].strip()
        label = self.table.get(mime_type.lower())
        if label is not None:
            return label
        # subtype as written, up to any further "/"
        parts = mime_type.split("/")
        return parts[1] if len(parts) > 1 else mime_type
