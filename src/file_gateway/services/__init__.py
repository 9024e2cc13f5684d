"""
Core services: file lifecycle orchestration, corpus statistics, format
classification and blob/record reconciliation.
"""

from .formats import DEFAULT_MIME_TYPE_LABELS, FormatClassifier
from .lifecycle import DownloadResult, FileLifecycleOrchestrator, UploadPayload
from .reconciliation import ReconciliationService
from .statistics import CorpusStatistics, StatisticsAggregator

__all__ = [
    "DEFAULT_MIME_TYPE_LABELS",
    "FormatClassifier",
    "DownloadResult",
    "FileLifecycleOrchestrator",
    "UploadPayload",
    "ReconciliationService",
    "CorpusStatistics",
    "StatisticsAggregator",
]
