"""Health check endpoint with optional database connectivity check."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from staybook.core.config import settings
from staybook.core.database import check_db_connected, get_db
from staybook.schemas.envelope import ApiResponse
from staybook.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[HealthResponse])
def get_health(db: Session = Depends(get_db)) -> ApiResponse[HealthResponse]:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return ApiResponse[HealthResponse](
        code=200,
        message="ok",
        result=HealthResponse(
            status="ok",
            environment=settings.APP_ENV,
            database=db_status,
        ),
    )
