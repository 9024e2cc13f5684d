from fastapi import APIRouter, Depends

from file_gateway.dependencies import get_reconciliation_service
from file_gateway.errors import failure_message
from file_gateway.schemas import ReconciliationRepairResponse, ReconciliationReport
from file_gateway.services import ReconciliationService

router = APIRouter()


@router.get("/reconciliation", response_model=ReconciliationReport)
def audit_stores(service: ReconciliationService = Depends(get_reconciliation_service)) -> ReconciliationReport:
    """Compare the blob listing with the metadata records. Read only."""
    with failure_message("Failed to audit storage"):
        return service.audit()


@router.post("/reconciliation/repair", response_model=ReconciliationRepairResponse)
def repair_stores(
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> ReconciliationRepairResponse:
    """Delete dangling records and create records for orphaned blobs."""
    with failure_message("Failed to repair storage"):
        return service.repair()
