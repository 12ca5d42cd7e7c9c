import uuid

from sqlalchemy import Column, String, Text, ForeignKey, DateTime, DECIMAL
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from db.base import Base

class PaymentLink(Base):
    __tablename__ = "payment_links"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    merchant_id = Column(String(36), ForeignKey("merchants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(DECIMAL(12, 2), nullable=False)
    status = Column(String(16), nullable=False, default="active", index=True)  # 'active', 'inactive'
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    merchant = relationship("Merchant", back_populates="payment_links")
    transactions = relationship("Transaction", back_populates="payment_link")
