"""
Gateway database layer

Record services over the document store: file records (read/write) and
download events (read only).
"""

from .download_event_service import DownloadEventService
from .file_record_service import FileRecordService

__all__ = ["DownloadEventService", "FileRecordService"]
