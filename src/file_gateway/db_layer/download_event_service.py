"""
Download event service.
The events are written by an external collaborator; the gateway only counts them.
"""

from docstore.local import DocumentAdapter
from file_gateway.errors import MetadataReadError


class DownloadEventService:
    """Read-only view of the download event collection"""

    def __init__(self, adapter: DocumentAdapter, collection: str = "downloads"):
        self.adapter = adapter
        self.collection = collection

    def count(self) -> int:
        """Total downloads, i.e. the size of the collection"""
        try:
            return self.adapter.count_documents(self.collection)
        except Exception as e:
            raise MetadataReadError("Failed to count download events") from e
