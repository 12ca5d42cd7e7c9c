from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from db.session import get_db
from core.auth import get_current_merchant_id
from crud.merchant import get_merchant_by_id, create_merchant, update_merchant
from schemas.merchant import MerchantCreate, MerchantUpdate, MerchantResponse
from utilities.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/merchants", tags=["merchants"])

@router.get("/me")
async def get_profile(
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """Return the authenticated merchant's profile"""
    merchant = get_merchant_by_id(db, merchant_id)
    if not merchant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Merchant profile not found"
        )
    return success_response(MerchantResponse.model_validate(merchant), "Merchant retrieved successfully")

@router.post("/me", status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: MerchantCreate,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """Create the merchant profile at signup"""
    if get_merchant_by_id(db, merchant_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Merchant profile already exists"
        )
    merchant = create_merchant(db, merchant_id, body)
    return success_response(MerchantResponse.model_validate(merchant), "Merchant profile created")

@router.put("/me")
async def update_settings(
    body: MerchantUpdate,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """Update business name, payout wallet, settlement token or network"""
    merchant = update_merchant(db, merchant_id, body)
    if not merchant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Merchant profile not found"
        )
    return success_response(MerchantResponse.model_validate(merchant), "Your settings have been updated successfully.")
