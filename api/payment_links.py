from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from config.settings import settings
from db.session import get_db
from core.auth import get_current_merchant_id
from crud.merchant import get_merchant_by_id
from crud.payment_link import get_payment_links_by_merchant, create_payment_link, set_payment_link_status
from models.payment_link import PaymentLink
from schemas.payment_link import PaymentLinkCreate, PaymentLinkStatusUpdate, PaymentLinkResponse
from utilities.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payment-links", tags=["payment-links"])

def _serialize(link: PaymentLink) -> dict:
    data = PaymentLinkResponse.model_validate(link).model_dump(mode="json")
    data["url"] = f"{settings.FRONTEND_URL.rstrip('/')}/pay/{link.id}"
    return data

@router.get("")
async def list_payment_links(
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """List the merchant's payment links, newest first"""
    links = get_payment_links_by_merchant(db, merchant_id)
    return success_response([_serialize(link) for link in links], "Payment links retrieved successfully")

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_link(
    body: PaymentLinkCreate,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """Create a new active payment link"""
    if not get_merchant_by_id(db, merchant_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Complete your merchant profile before creating payment links"
        )
    link = create_payment_link(db, merchant_id, body)
    return success_response(_serialize(link), "Your payment link has been created successfully.")

@router.patch("/{link_id}")
async def update_link_status(
    link_id: str,
    body: PaymentLinkStatusUpdate,
    merchant_id: str = Depends(get_current_merchant_id),
    db: Session = Depends(get_db)
):
    """Activate or deactivate a payment link"""
    link = set_payment_link_status(db, merchant_id, link_id, body.status)
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment link not found"
        )
    return success_response(_serialize(link), f"Payment link is now {body.status}")
