from sqlalchemy.orm import Session
from typing import Optional, List
import logging

from models.payment_link import PaymentLink
from schemas.payment_link import PaymentLinkCreate

logger = logging.getLogger(__name__)

def get_payment_link_by_id(db: Session, link_id: str) -> Optional[PaymentLink]:
    """Get payment link by ID"""
    return db.query(PaymentLink).filter(PaymentLink.id == link_id).first()

def get_payment_links_by_merchant(db: Session, merchant_id: str) -> List[PaymentLink]:
    """Get a merchant's payment links, newest first"""
    return (
        db.query(PaymentLink)
        .filter(PaymentLink.merchant_id == merchant_id)
        .order_by(PaymentLink.created_at.desc())
        .all()
    )

def create_payment_link(db: Session, merchant_id: str, link_data: PaymentLinkCreate) -> PaymentLink:
    """Create new active payment link"""
    try:
        db_link = PaymentLink(
            merchant_id=merchant_id,
            name=link_data.name,
            amount=link_data.amount,
            description=link_data.description,
            status="active",
        )
        db.add(db_link)
        db.commit()
        db.refresh(db_link)

        logger.info(f"Created payment link {db_link.id} for merchant {merchant_id}")
        return db_link

    except Exception as e:
        logger.error(f"Error creating payment link: {e}")
        db.rollback()
        raise

def set_payment_link_status(db: Session, merchant_id: str, link_id: str, status: str) -> Optional[PaymentLink]:
    """Activate or deactivate a merchant's payment link"""
    try:
        link = db.query(PaymentLink).filter(
            PaymentLink.id == link_id,
            PaymentLink.merchant_id == merchant_id
        ).first()
        if not link:
            return None

        link.status = status
        db.commit()
        db.refresh(link)

        logger.info(f"Payment link {link_id} set to {status}")
        return link

    except Exception as e:
        logger.error(f"Error updating payment link: {e}")
        db.rollback()
        raise
