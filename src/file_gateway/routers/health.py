from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API, blob store, and metadata store along with deployment mode.
    """
    settings = request.app.state.settings

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "blob_store": "initializing",
            "metadata_store": "initializing"
        },
        "ready": False
    }

    try:
        request.app.state.blob_store.ping()
        health_status["components"]["blob_store"] = "ready"
    except Exception as e:
        health_status["components"]["blob_store"] = f"error: {e}"
        health_status["status"] = "degraded"

    try:
        request.app.state.document_adapter.ping()
        health_status["components"]["metadata_store"] = "ready"
    except Exception as e:
        health_status["components"]["metadata_store"] = f"error: {e}"
        health_status["status"] = "degraded"

    health_status["ready"] = all(
        state == "ready" for state in health_status["components"].values()
    )

    return health_status
