from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
from solders.pubkey import Pubkey

from config.settings import settings

Network = Literal["devnet", "mainnet"]

def _check_wallet_address(value: str) -> str:
    try:
        Pubkey.from_string(value)
    except ValueError:
        raise ValueError("Invalid Solana wallet address")
    return value

def _check_token(value: str) -> str:
    symbol = value.upper()
    if symbol not in settings.ACCEPTED_TOKENS:
        raise ValueError(f"Token must be one of: {', '.join(settings.ACCEPTED_TOKENS)}")
    return symbol

class MerchantBase(BaseModel):
    business_name: str = Field(min_length=2, max_length=255)
    wallet_address: str
    preferred_token: str = "USDC"
    network: Network = "devnet"

    @field_validator("wallet_address")
    def validate_wallet_address(cls, v):
        return _check_wallet_address(v)

    @field_validator("preferred_token")
    def validate_preferred_token(cls, v):
        return _check_token(v)

class MerchantCreate(MerchantBase):
    pass

class MerchantUpdate(BaseModel):
    business_name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    wallet_address: Optional[str] = None
    preferred_token: Optional[str] = None
    network: Optional[Network] = None

    @field_validator("wallet_address")
    def validate_wallet_address(cls, v):
        return _check_wallet_address(v) if v is not None else v

    @field_validator("preferred_token")
    def validate_preferred_token(cls, v):
        return _check_token(v) if v is not None else v

class MerchantResponse(BaseModel):
    id: str
    business_name: str
    wallet_address: str
    preferred_token: str
    network: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
