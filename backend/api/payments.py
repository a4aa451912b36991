from fastapi import APIRouter, HTTPException, Depends
import logging

from api.auth import get_user, verify_admin
from core.db import get_db
from core.exceptions import TrueFitError
from core.utils import normalize_email, serialize_doc
from models.models import PaymentIntentRequest, PaymentInfo
from services import payments

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/create-payment-intent")
async def create_payment_intent(request: PaymentIntentRequest, user=Depends(get_user)):
    try:
        client_secret = await payments.create_payment_intent(request.amount)
        return {"clientSecret": client_secret}
    except Exception as e:
        logger.error(f"Error creating payment intent: {e}")
        raise HTTPException(status_code=500, detail={"message": "Internal Server Error", "error": str(e)})


@router.post("/api/save-payment-info")
async def save_payment_info(info: PaymentInfo, db=Depends(get_db)):
    """Record a confirmed payment and apply the booking side effects"""
    try:
        payment_id = await payments.save_payment_info(db, info.model_dump())
        return {"message": "Payment information saved successfully.", "insertedId": str(payment_id)}
    except TrueFitError:
        raise
    except Exception as e:
        logger.error(f"Error saving payment info: {e}")
        raise HTTPException(status_code=500, detail={"message": "Internal Server Error", "error": str(e)})


@router.post("/api/payments/{payment_id}/reconcile")
async def reconcile_payment(payment_id: str, user=Depends(verify_admin), db=Depends(get_db)):
    """Admin finishes the booking side effects of an incomplete payment"""
    payment = await payments.reconcile_payment(db, payment_id)
    return serialize_doc(payment)


@router.get("/bookings/{email}")
async def booking_for(email: str, user=Depends(get_user), db=Depends(get_db)):
    return serialize_doc(await payments.get_booking(db, normalize_email(email)))


@router.get("/financial-overview")
async def financial_overview(user=Depends(verify_admin), db=Depends(get_db)):
    """Latest transactions and total balance for the admin home"""
    try:
        return serialize_doc(await payments.financial_overview(db))
    except Exception as e:
        logger.error(f"Error fetching financial overview: {e}")
        raise HTTPException(status_code=500, detail={"message": "Internal server error", "error": str(e)})
