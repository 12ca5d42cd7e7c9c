from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

class TransactionCreate(BaseModel):
    merchant_id: str
    payment_link_id: str
    amount: Decimal
    token: str
    target_token: str
    payer: Optional[str] = None

class TransactionResponse(BaseModel):
    id: str
    merchant_id: str
    payment_link_id: str
    amount: Decimal
    token: str
    target_token: str
    payer: Optional[str] = None
    status: str
    transaction_signature: Optional[str]
    swap_signature: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TransactionPage(BaseModel):
    transactions: List[TransactionResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
