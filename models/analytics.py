from sqlalchemy import Column, Integer, String, Date, ForeignKey, DECIMAL
from db.base import Base

class TransactionAnalytics(Base):
    """Daily per-merchant rollup. In Supabase this is maintained by the database;
    the API only reads it."""
    __tablename__ = "transaction_analytics"

    id = Column(Integer, primary_key=True, index=True)
    merchant_id = Column(String(36), ForeignKey("merchants.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    total_transactions = Column(Integer, nullable=False, default=0)
    successful_transactions = Column(Integer, nullable=False, default=0)
    total_volume = Column(DECIMAL(14, 2), nullable=False, default=0)
