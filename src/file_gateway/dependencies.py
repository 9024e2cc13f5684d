"""FastAPI dependencies: the services built in ``create_app`` live on ``app.state``."""
from fastapi import Request

from file_gateway.services import FileLifecycleOrchestrator, ReconciliationService, StatisticsAggregator


def get_orchestrator(request: Request) -> FileLifecycleOrchestrator:
    return request.app.state.orchestrator


def get_statistics_aggregator(request: Request) -> StatisticsAggregator:
    return request.app.state.statistics


def get_reconciliation_service(request: Request) -> ReconciliationService:
    return request.app.state.reconciliation
