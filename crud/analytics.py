from datetime import date
from sqlalchemy.orm import Session
from typing import List

from models.analytics import TransactionAnalytics

def get_analytics_range(db: Session, merchant_id: str, date_from: date, date_to: date) -> List[TransactionAnalytics]:
    """Get daily analytics rows in [date_from, date_to], oldest first"""
    return (
        db.query(TransactionAnalytics)
        .filter(TransactionAnalytics.merchant_id == merchant_id)
        .filter(TransactionAnalytics.date >= date_from)
        .filter(TransactionAnalytics.date <= date_to)
        .order_by(TransactionAnalytics.date.asc())
        .all()
    )
