"""
Blob/record reconciliation.

The blob store and the metadata store drift apart when a compound operation
fails halfway (see ``lifecycle``). ``audit`` reports the drift, ``repair``
fixes it: dangling records are deleted and orphaned blobs are adopted by
creating a record for each. Repair only runs when asked for.

Repair is not isolated from concurrent uploads: a blob whose record is still
being written looks orphaned and can end up with two records.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List

from file_gateway.adapters.blob_store import S3BlobStore, blob_key
from file_gateway.db_layer import FileRecordService
from file_gateway.schemas import ReconciliationRepairResponse, ReconciliationReport
from file_gateway.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)


class ReconciliationService:

    def __init__(
        self,
        blob_store: S3BlobStore,
        records: FileRecordService,
        blob_prefix: str = "files/",
        signed_url_expiry_seconds: int = 604800,
    ):
        self.blob_store = blob_store
        self.records = records
        self.blob_prefix = blob_prefix
        self.signed_url_expiry_seconds = signed_url_expiry_seconds

    @log_execution_time
    def audit(self) -> ReconciliationReport:
        keys = set(self.blob_store.list_keys(prefix=self.blob_prefix))
        records = self.records.list_records()

        referenced = set()
        dangling = []
        ids_by_name: Dict[str, List[str]] = defaultdict(list)
        for record in records:
            key = blob_key(record.file_name, self.blob_prefix)
            referenced.add(key)
            ids_by_name[record.file_name].append(record.id)
            if key not in keys:
                dangling.append(record.id)

        report = ReconciliationReport(
            orphaned_blobs=sorted(keys - referenced),
            dangling_records=dangling,
            duplicate_file_names={name: ids for name, ids in ids_by_name.items() if len(ids) > 1},
        )
        if not report.consistent:
            logger.warning(
                f"Stores out of step: {len(report.orphaned_blobs)} orphaned blob(s), "
                f"{len(report.dangling_records)} dangling record(s)"
            )
        return report

    def repair(self) -> ReconciliationRepairResponse:
        report = self.audit()

        removed = []
        for record_id in report.dangling_records:
            if self.records.delete_record(record_id):
                removed.append(record_id)
                logger.info(f"Removed dangling record {record_id}")

        adopted = []
        for key in report.orphaned_blobs:
            file_name = key[len(self.blob_prefix):]
            if not file_name or "/" in file_name:
                logger.warning(f"Cannot adopt {key}: not a <prefix><fileName> key")
                continue
            metadata = self.blob_store.head(key)
            record = self.records.create_record(
                file_name=file_name,
                upload_date=metadata.last_modified or datetime.now(timezone.utc),
                file_url=self.blob_store.signed_url(key, self.signed_url_expiry_seconds),
            )
            adopted.append(key)
            logger.info(f"Adopted orphaned blob {key} as record {record.id}")

        return ReconciliationRepairResponse(adopted_blobs=adopted, removed_records=removed)
