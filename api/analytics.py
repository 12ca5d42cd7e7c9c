from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from datetime import date, timedelta
from typing import Optional

from config.settings import settings
from db.session import get_db
from core.auth import get_current_merchant_id
from crud.analytics import get_analytics_range
from schemas.analytics import AnalyticsRow
from utilities.response import success_response

router = APIRouter(prefix="/analytics", tags=["analytics"])

@router.get("")
async def list_analytics(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """Daily analytics rows for a date range (default: last 30 days)"""
    date_to = date_to or date.today()
    date_from = date_from or date_to - timedelta(days=settings.ANALYTICS_DEFAULT_DAYS)
    if date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be after date_to"
        )
    rows = get_analytics_range(db, merchant_id, date_from, date_to)
    return success_response(
        {
            "date_from": date_from,
            "date_to": date_to,
            "rows": [AnalyticsRow.model_validate(r) for r in rows],
        },
        "Analytics retrieved successfully"
    )
