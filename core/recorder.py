import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crud.transaction import create_transaction, complete_transaction, record_transfer_signature
from core.errors import PersistenceError, TransferAlreadySubmitted
from models.merchant import Merchant
from models.payment_link import PaymentLink
from models.transaction import Transaction
from schemas.transaction import TransactionCreate

logger = logging.getLogger(__name__)


class TransactionRecorder:
    """Writes the pending record before on-chain work and completes it after.

    Status only ever moves pending -> completed. When a swap follows the
    transfer, the confirmed transfer signature is stored first while the
    record stays pending.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_pending(
        self, link: PaymentLink, merchant: Merchant, token: str, payer: Optional[str] = None
    ) -> Transaction:
        try:
            return create_transaction(self.db, TransactionCreate(
                merchant_id=merchant.id,
                payment_link_id=link.id,
                amount=link.amount,
                token=token,
                target_token=merchant.preferred_token,
                payer=payer,
            ))
        except SQLAlchemyError as e:
            raise PersistenceError() from e

    def mark_transferred(self, transaction_id: str, transaction_signature: str) -> None:
        try:
            updated = record_transfer_signature(self.db, transaction_id, transaction_signature)
        except SQLAlchemyError as e:
            raise PersistenceError(transfer_signature=transaction_signature) from e
        if not updated:
            raise TransferAlreadySubmitted(transfer_signature=transaction_signature)

    def complete(self, transaction_id: str, transaction_signature: str, swap_signature: Optional[str] = None) -> None:
        try:
            updated = complete_transaction(self.db, transaction_id, transaction_signature, swap_signature)
        except SQLAlchemyError as e:
            raise PersistenceError(transfer_signature=transaction_signature) from e
        if not updated:
            raise PersistenceError(
                f"Transaction {transaction_id} is not pending",
                transfer_signature=transaction_signature,
            )
