from fastapi import APIRouter, Depends

from file_gateway.dependencies import get_statistics_aggregator
from file_gateway.errors import failure_message
from file_gateway.schemas import FileFormatsResponse, StatisticsResponse
from file_gateway.services import StatisticsAggregator

router = APIRouter()


@router.get("/statistics", response_model=StatisticsResponse)
def get_statistics(aggregator: StatisticsAggregator = Depends(get_statistics_aggregator)) -> StatisticsResponse:
    """Download count, storage used and object count for the whole bucket."""
    with failure_message("Failed to fetch statistics"):
        stats = aggregator.statistics()
    return StatisticsResponse(
        total_downloads=stats.total_downloads,
        storage_used=f"{stats.storage_used_gb:.2f}",
        total_files=stats.total_files,
    )


@router.get("/file-formats", response_model=FileFormatsResponse)
def get_file_formats(aggregator: StatisticsAggregator = Depends(get_statistics_aggregator)) -> FileFormatsResponse:
    """How many stored objects there are of each format."""
    with failure_message("Failed to fetch file formats"):
        formats = aggregator.file_formats()
    return FileFormatsResponse(formats=list(formats.items()))
