from sqlalchemy.orm import Session
from typing import Optional
import logging

from models.merchant import Merchant
from schemas.merchant import MerchantCreate, MerchantUpdate

logger = logging.getLogger(__name__)

def get_merchant_by_id(db: Session, merchant_id: str) -> Optional[Merchant]:
    """Get merchant by ID"""
    return db.query(Merchant).filter(Merchant.id == merchant_id).first()

def create_merchant(db: Session, merchant_id: str, merchant_data: MerchantCreate) -> Merchant:
    """Create merchant profile for an authenticated user"""
    try:
        db_merchant = Merchant(
            id=merchant_id,
            business_name=merchant_data.business_name,
            wallet_address=merchant_data.wallet_address,
            preferred_token=merchant_data.preferred_token,
            network=merchant_data.network,
        )
        db.add(db_merchant)
        db.commit()
        db.refresh(db_merchant)

        logger.info(f"Created merchant profile: {merchant_id}")
        return db_merchant

    except Exception as e:
        logger.error(f"Error creating merchant: {e}")
        db.rollback()
        raise

def update_merchant(db: Session, merchant_id: str, merchant_data: MerchantUpdate) -> Optional[Merchant]:
    """Update merchant settings"""
    try:
        merchant = get_merchant_by_id(db, merchant_id)
        if not merchant:
            return None

        update_data = merchant_data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(merchant, field, value)

        db.commit()
        db.refresh(merchant)

        logger.info(f"Updated merchant {merchant_id}")
        return merchant

    except Exception as e:
        logger.error(f"Error updating merchant: {e}")
        db.rollback()
        raise
