import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from comicapi.config import settings
from comicapi.database.session import get_db
from comicapi.schemas.base import ApiResponse
from comicapi.schemas.health import HealthStatus

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=ApiResponse[HealthStatus])
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint (DB 연결 포함)."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {type(e).__name__}")
        database = "unavailable"

    status = HealthStatus(
        service=settings.APP_NAME, environment=settings.ENVIRONMENT, database=database
    )
    if database != "ok":
        body = ApiResponse.of(status, status_code=503, message="Database unavailable")
        return JSONResponse(status_code=503, content=body.model_dump(mode="json", by_alias=True))
    return ApiResponse.of(status)
