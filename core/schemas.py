from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class PaymentInstrument(BaseModel):
    instrument: str
    banks: List[str] = Field(default_factory=list)


class OfferRecord(BaseModel):
    """Canonical offer, independent of the vendor payload shape."""
    adjustment_id: str
    title: str = ""
    description: str = ""
    type: str = ""
    payment_instruments: List[PaymentInstrument] = Field(default_factory=list)
    min_trxn_value: Decimal = Decimal("0")
    max_discount: Decimal = Decimal("0")
    discount_percentage: int = Field(default=0, ge=0, le=100)

    def to_row(self):
        """Column values for an `offers` insert."""
        return {
            'adjustment_id': self.adjustment_id,
            'title': self.title,
            'description': self.description,
            'type': self.type,
            'payment_instruments': [pi.model_dump() for pi in self.payment_instruments],
            'min_trxn_value': self.min_trxn_value,
            'max_discount': self.max_discount,
            'discount_percentage': self.discount_percentage,
        }
