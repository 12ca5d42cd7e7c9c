from sqlalchemy.orm import Session
from typing import Optional, List, Tuple
import logging

from models.transaction import Transaction
from schemas.transaction import TransactionCreate

logger = logging.getLogger(__name__)

# Columns the transaction history may be ordered by
SORTABLE_COLUMNS = {
    "id": Transaction.id,
    "amount": Transaction.amount,
    "status": Transaction.status,
    "created_at": Transaction.created_at,
}

def get_transaction_by_id(db: Session, transaction_id: str) -> Optional[Transaction]:
    """Get transaction by ID"""
    return db.query(Transaction).filter(Transaction.id == transaction_id).first()

def get_transactions_page(
    db: Session,
    merchant_id: str,
    page: int,
    page_size: int,
    sort: str = "created_at",
    ascending: bool = False,
) -> Tuple[List[Transaction], int]:
    """Get one page of a merchant's transactions plus the total count"""
    column = SORTABLE_COLUMNS[sort]
    query = db.query(Transaction).filter(Transaction.merchant_id == merchant_id)
    total = query.count()
    order = column.asc() if ascending else column.desc()
    rows = query.order_by(order).offset((page - 1) * page_size).limit(page_size).all()
    return rows, total

def create_transaction(db: Session, transaction_data: TransactionCreate) -> Transaction:
    """Create new pending transaction"""
    try:
        db_transaction = Transaction(
            merchant_id=transaction_data.merchant_id,
            payment_link_id=transaction_data.payment_link_id,
            amount=transaction_data.amount,
            token=transaction_data.token,
            target_token=transaction_data.target_token,
            payer=transaction_data.payer,
            status="pending"
        )

        db.add(db_transaction)
        db.commit()
        db.refresh(db_transaction)

        logger.info(f"Created new transaction: {db_transaction.id}")
        return db_transaction

    except Exception as e:
        logger.error(f"Error creating transaction: {e}")
        db.rollback()
        raise

def complete_transaction(
    db: Session,
    transaction_id: str,
    transaction_signature: str,
    swap_signature: Optional[str] = None,
) -> bool:
    """Mark a pending transaction as completed with its signatures.

    Returns False when no pending row matched; a completed row is never rewritten.
    """
    try:
        updated = (
            db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.status == "pending")
            .update(
                {
                    Transaction.status: "completed",
                    Transaction.transaction_signature: transaction_signature,
                    Transaction.swap_signature: swap_signature,
                },
                synchronize_session="fetch",
            )
        )
        db.commit()

        if updated:
            logger.info(f"Completed transaction {transaction_id}")
        return bool(updated)

    except Exception as e:
        logger.error(f"Error completing transaction: {e}")
        db.rollback()
        raise

def record_transfer_signature(db: Session, transaction_id: str, transaction_signature: str) -> bool:
    """Attach the confirmed transfer signature to a pending transaction, keeping it pending.

    Only the first signature sticks; returns False if the row is no longer pending
    or already has one.
    """
    try:
        updated = (
            db.query(Transaction)
            .filter(
                Transaction.id == transaction_id,
                Transaction.status == "pending",
                Transaction.transaction_signature.is_(None),
            )
            .update({Transaction.transaction_signature: transaction_signature}, synchronize_session="fetch")
        )
        db.commit()

        if updated:
            logger.info(f"Recorded transfer {transaction_signature} on transaction {transaction_id}")
        return bool(updated)

    except Exception as e:
        logger.error(f"Error recording transfer signature: {e}")
        db.rollback()
        raise
