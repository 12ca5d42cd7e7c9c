from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Literal
import math

from config.settings import settings
from db.session import get_db
from core.auth import get_current_merchant_id
from crud.transaction import get_transactions_page
from schemas.transaction import TransactionResponse, TransactionPage
from utilities.response import success_response

router = APIRouter(prefix="/transactions", tags=["transactions"])

@router.get("")
async def list_transactions(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort: Literal["id", "amount", "status", "created_at"] = "created_at",
    ascending: bool = False,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """Transaction history, ordered and paginated in the database"""
    rows, total = get_transactions_page(db, merchant_id, page, page_size, sort, ascending)
    data = TransactionPage(
        transactions=[TransactionResponse.model_validate(row) for row in rows],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )
    return success_response(data, "Transactions retrieved successfully")
