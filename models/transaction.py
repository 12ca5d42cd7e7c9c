import uuid

from sqlalchemy import Column, String, ForeignKey, DateTime, DECIMAL
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from db.base import Base

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    merchant_id = Column(String(36), ForeignKey("merchants.id"), nullable=False, index=True)
    payment_link_id = Column(String(36), ForeignKey("payment_links.id"), nullable=False, index=True)
    amount = Column(DECIMAL(12, 2), nullable=False)
    token = Column(String(16), nullable=False)  # what the customer paid with
    target_token = Column(String(16), nullable=False)  # merchant settlement token
    payer = Column(String(64), nullable=True)  # customer wallet, fee payer of both transactions
    status = Column(String(16), default="pending", nullable=False, index=True)  # 'pending', 'completed'
    transaction_signature = Column(String(128), nullable=True)
    swap_signature = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    merchant = relationship("Merchant", back_populates="transactions")
    payment_link = relationship("PaymentLink", back_populates="transactions")
