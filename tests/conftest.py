import sys
import copy
from pathlib import Path

import pytest
from sqlalchemy.pool import StaticPool

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.database import init_db, make_engine, make_session_factory

# Trimmed-down Flipkart offer API response
SAMPLE_RESPONSE = {
    "RESPONSE": {
        "offer_sections": {
            "PBO": {
                "title": "Bank offers",
                "offers": [
                    {
                        "adjustment_id": "FPO250619134128USHPF",
                        "contributors": {"payment_instrument": ["CREDIT", "EMI_OPTIONS"], "banks": ["IDFC"]},
                    },
                    {
                        "adjustment_id": "FPO250101AXISFLAT",
                        "contributors": {"payment_instrument": ["UPI"], "banks": ["AXIS", "FLIPKARTAXISBANK"]},
                    },
                    {
                        "adjustment_id": "FPO250301NOCOSTEMI",
                        "contributors": {"payment_instrument": ["EMI_OPTIONS"], "banks": ["HDFC"]},
                    },
                ],
            },
            "DISCLAIMER": {"text": "Offers are subject to change"},
        },
        "adjustment_list": [
            {
                "offer_details": {
                    "adjustment_id": "FPO250619134128USHPF",
                    "title": "5% off on IDFC FIRST Bank Credit Card",
                    "summary": "5% off up to ₹750 on IDFC FIRST Power Women Platinum and Signature Debit Card. Min Trxn value ₹5,000",
                    "adjustment_type": "INSTANT_DISCOUNT",
                    "adjustment_sub_type": "PAYMENT_OFFER",
                    "offer_txn_limits": {"min_txn_value": 500000, "max_discount_per_txn": 75000},
                },
            },
            {
                "offer_details": {
                    "adjustment_id": "FPO250101AXISFLAT",
                    "title": "Flat ₹100 off on Axis UPI",
                    "summary": "Flat ₹100 off on Axis Bank UPI transactions",
                    "adjustment_type": "INSTANT_DISCOUNT",
                    "adjustment_sub_type": "PAYMENT_OFFER",
                    "offer_txn_limits": {"min_txn_value": 100000, "max_discount_per_txn": 10000},
                },
            },
            {
                "offer_details": {
                    "adjustment_id": "FPO250301NOCOSTEMI",
                    "title": "No Cost EMI on HDFC",
                    "summary": "Save interest with No Cost EMI",
                    "adjustment_type": "EMI",
                    "adjustment_sub_type": "EMI_FULL_INTEREST_WAIVER",
                    "offer_txn_limits": {"min_txn_value": 300000},
                },
            },
            {
                "offer_details": {
                    "adjustment_id": "FPO250402ORPHAN",
                    "title": "10% off on SBI",
                    "summary": "10% off up to ₹1,000",
                    "adjustment_type": "INSTANT_DISCOUNT",
                    "adjustment_sub_type": "PAYMENT_OFFER",
                    "offer_txn_limits": {"min_txn_value": 0, "max_discount_per_txn": 100000},
                },
            },
            {"display_text": "More offers coming soon"},
        ],
    }
}


@pytest.fixture
def sample_response():
    return copy.deepcopy(SAMPLE_RESPONSE)


@pytest.fixture
def engine():
    engine = make_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()
