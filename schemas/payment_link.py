from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal

class PaymentLinkCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0, decimal_places=2)
    description: Optional[str] = None

class PaymentLinkStatusUpdate(BaseModel):
    status: Literal["active", "inactive"]

class PaymentLinkResponse(BaseModel):
    id: str
    merchant_id: str
    name: str
    description: Optional[str]
    amount: Decimal
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
