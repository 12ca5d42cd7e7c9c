"""Customer-facing payment routes.

The wallet lives in the customer's browser, so the flow is split at each
signature: start (unsigned transfer out), transfer (signed transfer in,
optional unsigned swap out), swap (signed swap in).
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import base64
import binascii
import logging

from solders.pubkey import Pubkey

from db.session import get_db
from core.errors import NotFound
from core.payment import PaymentProcessor, get_payment_processor, explorer_url, success_path
from crud.merchant import get_merchant_by_id
from crud.payment_link import get_payment_link_by_id
from schemas.payment import (
    CheckoutResponse, StartPaymentIn, StartPaymentOut, SignedTransactionIn,
    TransferSubmitOut, PaymentCompleteOut, ReceiptResponse,
)
from utilities.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pay", tags=["payment"])

def get_processor(db: Session = Depends(get_db)) -> PaymentProcessor:
    return get_payment_processor(db)

def _decode_transaction(encoded: str) -> bytes:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="signed_transaction must be base64 encoded"
        )

def _encode_transaction(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")

@router.get("/{link_id}", summary="Payment card data for a link")
async def get_checkout(link_id: str, processor: PaymentProcessor = Depends(get_processor)):
    link, merchant, tokens = await processor.checkout(link_id)
    data = CheckoutResponse(
        link_id=link.id,
        name=link.name,
        description=link.description,
        amount=link.amount,
        merchant_name=merchant.business_name,
        preferred_token=merchant.preferred_token,
        network=merchant.network,
        tokens=tokens,
    )
    return success_response(data, "Payment link retrieved successfully")

@router.post("/{link_id}/transactions", summary="Start a payment and get the unsigned transfer")
async def start_payment(
    link_id: str,
    body: StartPaymentIn,
    processor: PaymentProcessor = Depends(get_processor)
):
    record, unsigned, swap_required = await processor.start_relay(
        link_id, body.token, Pubkey.from_string(body.payer)
    )
    data = StartPaymentOut(
        transaction_id=record.id,
        transfer_transaction=_encode_transaction(unsigned),
        swap_required=swap_required,
    )
    return success_response(data, "Transaction created; sign the transfer with your wallet")

@router.post("/{link_id}/transactions/{transaction_id}/transfer", summary="Submit the signed transfer")
async def submit_transfer(
    link_id: str,
    transaction_id: str,
    body: SignedTransactionIn,
    processor: PaymentProcessor = Depends(get_processor)
):
    signed = _decode_transaction(body.signed_transaction)
    outcome = await processor.submit_relay_transfer(link_id, transaction_id, signed)
    if outcome.swap_required:
        data = TransferSubmitOut(
            transaction_id=transaction_id,
            transaction_signature=outcome.transaction_signature,
            swap_required=True,
            status="pending",
            swap_transaction=_encode_transaction(outcome.swap_transaction),
            quote=outcome.quote,
        )
        return success_response(data, "Transfer confirmed; sign the swap with your wallet")

    data = TransferSubmitOut(
        transaction_id=transaction_id,
        transaction_signature=outcome.transaction_signature,
        swap_required=False,
        status="completed",
        redirect_url=success_path(link_id, outcome.transaction_signature),
    )
    return success_response(data, "Your payment has been processed successfully.")

@router.post("/{link_id}/transactions/{transaction_id}/swap", summary="Submit the signed swap")
async def submit_swap(
    link_id: str,
    transaction_id: str,
    body: SignedTransactionIn,
    processor: PaymentProcessor = Depends(get_processor)
):
    signed = _decode_transaction(body.signed_transaction)
    result = await processor.submit_relay_swap(link_id, transaction_id, signed)
    data = PaymentCompleteOut(
        transaction_id=result.transaction_id,
        transaction_signature=result.transaction_signature,
        swap_signature=result.swap_signature,
        status="completed",
        redirect_url=result.redirect_url,
    )
    return success_response(data, "Your payment has been processed successfully.")

@router.get("/{link_id}/success", summary="Payment receipt")
async def get_receipt(
    link_id: str,
    tx: Optional[str] = Query(None, description="Transfer signature"),
    db: Session = Depends(get_db)
):
    link = get_payment_link_by_id(db, link_id)
    if not link:
        raise NotFound()
    merchant = get_merchant_by_id(db, link.merchant_id)
    if not merchant:
        raise NotFound("Merchant not found")
    data = ReceiptResponse(
        amount=link.amount,
        merchant_name=merchant.business_name,
        link_name=link.name,
        network=merchant.network,
        transaction_signature=tx,
        explorer_url=explorer_url(tx, merchant.network) if tx else None,
    )
    return success_response(data, "Payment details retrieved successfully")
