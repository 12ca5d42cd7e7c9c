from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from db.base import Base

class Merchant(Base):
    __tablename__ = "merchants"

    id = Column(String(36), primary_key=True, index=True)  # Supabase auth user id
    business_name = Column(String(255), nullable=False)
    wallet_address = Column(String(64), nullable=False)
    preferred_token = Column(String(16), nullable=False, default="USDC")
    network = Column(String(16), nullable=False, default="devnet")  # 'devnet', 'mainnet'
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    payment_links = relationship("PaymentLink", back_populates="merchant")
    transactions = relationship("Transaction", back_populates="merchant")
    api_keys = relationship("ApiKey", back_populates="merchant", cascade="all, delete-orphan")
