"""Request/response bodies for the customer-facing payment routes."""
from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any
from decimal import Decimal
from solders.pubkey import Pubkey

class TokenInfo(BaseModel):
    symbol: str
    name: str
    address: str  # mint
    decimals: int
    logo_uri: Optional[str] = None

class CheckoutResponse(BaseModel):
    link_id: str
    name: str
    description: Optional[str]
    amount: Decimal
    merchant_name: str
    preferred_token: str
    network: str
    tokens: List[TokenInfo]

class StartPaymentIn(BaseModel):
    token: str
    payer: str

    @field_validator("token")
    def normalize_token(cls, v):
        return v.upper()

    @field_validator("payer")
    def validate_payer(cls, v):
        try:
            Pubkey.from_string(v)
        except ValueError:
            raise ValueError("Invalid payer public key")
        return v

class StartPaymentOut(BaseModel):
    transaction_id: str
    transfer_transaction: str  # base64, unsigned
    swap_required: bool

class SignedTransactionIn(BaseModel):
    signed_transaction: str  # base64

class TransferSubmitOut(BaseModel):
    transaction_id: str
    transaction_signature: str
    swap_required: bool
    status: str
    swap_transaction: Optional[str] = None  # base64, unsigned
    quote: Optional[Dict[str, Any]] = None
    redirect_url: Optional[str] = None

class PaymentCompleteOut(BaseModel):
    transaction_id: str
    transaction_signature: str
    swap_signature: Optional[str]
    status: str
    redirect_url: str

class ReceiptResponse(BaseModel):
    amount: Decimal
    merchant_name: str
    link_name: str
    network: str
    transaction_signature: Optional[str]
    explorer_url: Optional[str]
