"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, object]:
    """Return application, database and asset catalog status."""
    service = getattr(request.app.state, "dice_service", None)
    catalog = service.catalog_size() if service is not None else 0

    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "catalog_assets": catalog}
    except Exception:
        return {"status": "error", "database": "disconnected", "catalog_assets": catalog}
