from fastapi import APIRouter, Request

from motoshop.core.errors import GatewayError
from motoshop.gateway.tables import TableStore

router = APIRouter()


@router.get("/")
def health_check(request: Request):
    """
    Health check endpoint that verifies API, database and platform config.

    Returns:
        dict: Health status of the API and its backend
    """
    health_status = {
        "status": "healthy",
        "api": "online",
        "database": "online",
        "backend": "configured" if request.app.state.config.backend_configured else "not configured",
    }

    # Check database connection
    try:
        TableStore(request.app.state.session_factory).ping()
    except GatewayError as e:
        health_status["database"] = "offline"
        health_status["status"] = "unhealthy"
        health_status["database_error"] = e.message

    return health_status
