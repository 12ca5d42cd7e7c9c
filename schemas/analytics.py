from pydantic import BaseModel
from datetime import date
from decimal import Decimal

class AnalyticsRow(BaseModel):
    date: date
    total_transactions: int
    successful_transactions: int
    total_volume: Decimal

    class Config:
        from_attributes = True
