from sqlalchemy.orm import Session
from typing import Optional, List
import logging

from models.api_key import ApiKey

logger = logging.getLogger(__name__)

def get_api_keys_by_merchant(db: Session, merchant_id: str) -> List[ApiKey]:
    return db.query(ApiKey).filter(ApiKey.merchant_id == merchant_id).order_by(ApiKey.created_at).all()

def _get_owned_key(db: Session, merchant_id: str, key_id: str) -> Optional[ApiKey]:
    return db.query(ApiKey).filter(ApiKey.id == key_id, ApiKey.merchant_id == merchant_id).first()

def create_api_key(db: Session, merchant_id: str, network: str) -> ApiKey:
    """Generate a new API key for the given network"""
    try:
        api_key = ApiKey(merchant_id=merchant_id, network=network)
        db.add(api_key)
        db.commit()
        db.refresh(api_key)
        logger.info(f"Generated {network} API key {api_key.id} for merchant {merchant_id}")
        return api_key
    except Exception as e:
        logger.error(f"Error generating API key: {e}")
        db.rollback()
        raise

def set_api_key_active(db: Session, merchant_id: str, key_id: str, is_active: bool) -> Optional[ApiKey]:
    try:
        api_key = _get_owned_key(db, merchant_id, key_id)
        if not api_key:
            return None
        api_key.is_active = is_active
        db.commit()
        db.refresh(api_key)
        logger.info(f"API key {key_id} {'enabled' if is_active else 'disabled'}")
        return api_key
    except Exception as e:
        logger.error(f"Error updating API key: {e}")
        db.rollback()
        raise

def delete_api_key(db: Session, merchant_id: str, key_id: str) -> bool:
    try:
        api_key = _get_owned_key(db, merchant_id, key_id)
        if not api_key:
            return False
        db.delete(api_key)
        db.commit()
        logger.info(f"Deleted API key {key_id}")
        return True
    except Exception as e:
        logger.error(f"Error deleting API key: {e}")
        db.rollback()
        raise
