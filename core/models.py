from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    Numeric,
    Integer,
    JSON,
    Index,
    func
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class Offer(Base):
    __tablename__ = 'offers'
    adjustment_id = Column(Text, primary_key=True)
    title = Column(Text, nullable=False, server_default='')
    description = Column(Text, nullable=False, server_default='')
    type = Column(Text, nullable=False, server_default='') # e.g. INSTANT_DISCOUNT, CASHBACK_ON_CARD
    # [{"instrument": "CREDIT", "banks": ["IDFC", "HDFC"]}, ...]
    payment_instruments = Column(JSON, nullable=False, default=list)
    min_trxn_value = Column(Numeric(12, 2), nullable=False, server_default='0') # Rupees
    max_discount = Column(Numeric(12, 2), nullable=False, server_default='0') # Rupees
    discount_percentage = Column(Integer, nullable=False, server_default='0')
    created_ts = Column(TIMESTAMP, server_default=func.now())
    __table_args__ = (Index('idx_offers_min_trxn_value', 'min_trxn_value'),)

    def __repr__(self):
        return f"<Offer {self.adjustment_id} {self.discount_percentage}% max={self.max_discount}>"
