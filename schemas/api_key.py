from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

class ApiKeyCreate(BaseModel):
    network: Literal["devnet", "mainnet"]

class ApiKeyToggle(BaseModel):
    is_active: bool

class ApiKeyResponse(BaseModel):
    id: str
    merchant_id: str
    key: str
    network: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
