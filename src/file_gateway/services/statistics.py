"""
Corpus-wide statistics over the blob store.

Read only. Every call re-scans the whole bucket, one metadata request per
object, so cost grows linearly with the number of stored objects. Counts
come from the blob listing, not from the metadata records, and the two
diverge whenever orphaned blobs or dangling records exist.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Optional

from file_gateway.adapters.blob_store import S3BlobStore
from file_gateway.db_layer import DownloadEventService
from file_gateway.errors import AggregationPartialFailure, StorageReadError
from file_gateway.services.formats import FormatClassifier
from file_gateway.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1024 ** 3


@dataclass(frozen=True)
class CorpusStatistics:
    total_downloads: int
    storage_used_gb: float
    total_files: int


class StatisticsAggregator:
    """Counts, total size and format distribution of everything in the bucket."""

    def __init__(
        self,
        blob_store: S3BlobStore,
        download_events: DownloadEventService,
        classifier: FormatClassifier,
    ):
        self.blob_store = blob_store
        self.download_events = download_events
        self.classifier = classifier

    def _object_size(self, key: str) -> Optional[int]:
        try:
            return self.blob_store.head(key).size
        except StorageReadError as e:
            raise AggregationPartialFailure(key, e) from e

    @log_execution_time
    def statistics(self) -> CorpusStatistics:
        total_downloads = self.download_events.count()

        keys = self.blob_store.list_keys()
        if not keys:
            logger.warning("No files found in storage.")

        total_bytes = 0
        for key in keys:
            try:
                size = self._object_size(key)
            except AggregationPartialFailure as e:
                logger.warning(f"Skipping {key} in storage total: {e.cause}")
                continue
            if size is None:
                logger.warning(f"No size metadata for file: {key}")
                continue
            total_bytes += size

        return CorpusStatistics(
            total_downloads=total_downloads,
            storage_used_gb=round(total_bytes / BYTES_PER_GB, 2),
            total_files=len(keys),
        )

    @log_execution_time
    def file_formats(self) -> Dict[str, int]:
        """Occurrences of each format label; objects without a content type are left out.

        Unlike ``statistics``, a failing metadata read aborts the whole call.
        """
        formats: Counter = Counter()
        for key in self.blob_store.list_keys():
            content_type = self.blob_store.head(key).content_type
            if content_type:
                formats[self.classifier.classify(content_type)] += 1
        return dict(formats)
