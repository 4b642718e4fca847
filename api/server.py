import sys
import math
import logging
from contextlib import asynccontextmanager
from decimal import Decimal, InvalidOperation
from pathlib import Path
from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Any, Optional
from sqlalchemy.orm import Session

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from config import DB_URL, LOG_LEVEL, PORT
from api.dependencies import get_session
from core.database import make_engine, make_session_factory
from core.discounts import highest_discount
from core.store import upsert_new
from etl.normalize import normalize_offers

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = make_engine(DB_URL)
    app.state.Session = make_session_factory(engine)
    logger.info("Connected to %s", engine.url.render_as_string(hide_password=True))
    try:
        yield
    finally:
        engine.dispose()


app = FastAPI(lifespan=lifespan)
router = APIRouter(prefix="/api", tags=["offers"])

INGEST_PATH = "/api/offer"
INGEST_ENVELOPE = "flipkartOfferApiResponse"
MISSING_ENVELOPE = f"Missing {INGEST_ENVELOPE} in request body"

@app.exception_handler(RequestValidationError)
async def ingest_body_error(request: Request, exc: RequestValidationError):
    """An unparseable ingest body is a missing envelope; other routes keep the 422."""
    if request.url.path == INGEST_PATH:
        logger.warning("%s (unparseable body)", MISSING_ENVELOPE)
        return JSONResponse(status_code=400, content={"detail": MISSING_ENVELOPE})
    return await request_validation_exception_handler(request, exc)

class IngestResponse(BaseModel):
    noOfOffersIdentified: int
    noOfNewOffersCreated: int

class HighestDiscountResponse(BaseModel):
    highestDiscountAmount: float

def parse_amount(value):
    """
    Parse a non-negative amount; None if the value is not one.

    Amounts must also fit a float, since that is what the response carries.
    """
    if value is None or "_" in value:
        return None
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0 or not math.isfinite(float(amount)):
        return None
    return amount

@app.get("/healthz")
def health_check():
    return {"status": "ok"}

@router.post("/offer", response_model=IngestResponse, status_code=201)
def create_offers(
    response: Response,
    body: Any = Body(None),
    session: Session = Depends(get_session),
):
    """
    Store the offers found in a Flipkart offer API response.

    Offers already stored (by adjustment id) are left untouched.
    """
    vendor_response = body.get(INGEST_ENVELOPE) if isinstance(body, dict) else None
    if not isinstance(vendor_response, dict):
        logger.warning(MISSING_ENVELOPE)
        raise HTTPException(status_code=400, detail=MISSING_ENVELOPE)

    try:
        candidates = normalize_offers(vendor_response)
        if not candidates:
            logger.info("No applicable offers identified from the API response.")
            response.status_code = 200
            return IngestResponse(noOfOffersIdentified=0, noOfNewOffersCreated=0)

        result = upsert_new(session, candidates)
    except Exception as e:
        logger.exception("Error creating offers")
        raise HTTPException(status_code=500, detail=f"Error creating offers: {str(e)}")

    return IngestResponse(
        noOfOffersIdentified=result.identified,
        noOfNewOffersCreated=result.created,
    )

@router.get("/highest-discount", response_model=HighestDiscountResponse)
def get_highest_discount(
    amountToPay: Optional[str] = None,
    bankName: Optional[str] = None,
    paymentInstrument: Optional[str] = None,
    session: Session = Depends(get_session),
):
    """
    Highest discount any stored offer gives for this amount, bank and
    (optionally) payment instrument. 0 when nothing applies.
    """
    amount = parse_amount(amountToPay)
    if amount is None or not bankName:
        logger.warning("Invalid query parameters for highest discount: amountToPay=%r bankName=%r",
                       amountToPay, bankName)
        raise HTTPException(
            status_code=400,
            detail="Invalid query parameters. `amountToPay` and `bankName` are required.",
        )

    try:
        discount = highest_discount(session, amount, bankName, paymentInstrument or None)
    except Exception as e:
        logger.exception("Error calculating highest discount")
        raise HTTPException(status_code=500, detail=f"Error calculating highest discount: {str(e)}")

    logger.info("Highest discount for %s on %s/%s: %s", amount, bankName, paymentInstrument, discount)
    return HighestDiscountResponse(highestDiscountAmount=float(discount))

app.include_router(router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
