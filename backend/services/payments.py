"""
Slot booking and payment recording.

A booking is paid in two client-driven phases: the client first obtains a
Stripe client secret for the amount, then posts the confirmed payment. The
Payment document is written first and carries one fulfillment flag per
follow-up update (class booking counters, trainer slot count, member
subscription). A failed step leaves the Payment marked ``incomplete`` so
``reconcile_payment`` can finish only the steps that never ran.

Each step also records the Payment id on the document it changes and skips
documents already carrying it, so a step whose flag write was lost is not
applied twice when it runs again.
"""
import os
import logging
from datetime import datetime
from typing import Any, Dict, List

import stripe
from dotenv import load_dotenv
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

from core.db import CLASSES, PAYMENTS, SLOTS, USERS
from core.exceptions import NotFoundError, WorkflowError
from core.utils import parse_object_id

load_dotenv()

logger = logging.getLogger(__name__)

STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "usd")
FINANCIAL_OVERVIEW_LIMIT = 6

FULFILLMENT_STEPS = ("classBookings", "trainerSlots", "subscription")


async def create_payment_intent(amount: int) -> str:
    """Ask Stripe for a payment intent and return its client secret."""
    intent = await run_in_threadpool(
        stripe.PaymentIntent.create,
        amount=amount,
        currency=STRIPE_CURRENCY,
        api_key=os.getenv("STRIPE_SECRET_KEY"),
    )
    logger.info(f"💳 Payment intent created for amount: {amount}")
    return intent["client_secret"]


async def _check_references(db, trainer_id, slot_id, class_ids: List) -> None:
    if not await db[USERS].find_one({"_id": trainer_id}):
        raise NotFoundError("Trainer not found.")
    if not await db[SLOTS].find_one({"_id": slot_id}):
        raise NotFoundError("Slot not found.")
    unique_ids = list(set(class_ids))
    if unique_ids:
        found = await db[CLASSES].count_documents({"_id": {"$in": unique_ids}})
        if found != len(unique_ids):
            raise NotFoundError("Class not found.")


async def _increment_class_bookings(db, payment: Dict[str, Any]) -> None:
    class_ids = [parse_object_id(class_id) for class_id in payment.get("classesId") or []]
    if class_ids:
        await db[CLASSES].update_many(
            {"_id": {"$in": class_ids}, "paymentIds": {"$ne": payment["_id"]}},
            {"$inc": {"bookings": 1}, "$addToSet": {"paymentIds": payment["_id"]}},
        )


async def _decrement_trainer_slots(db, payment: Dict[str, Any]) -> None:
    # No floor: a trainer at 0 slots goes negative
    await db[USERS].update_one(
        {"_id": parse_object_id(payment["trainerId"]), "slotPaymentIds": {"$ne": payment["_id"]}},
        {"$inc": {"slots": -1}, "$addToSet": {"slotPaymentIds": payment["_id"]}},
    )


async def _set_subscription(db, payment: Dict[str, Any]) -> None:
    await db[USERS].update_one(
        {"email": payment["userEmail"], "subscriptionPaymentIds": {"$ne": payment["_id"]}},
        {"$set": {"subscription": payment["packageName"]}, "$addToSet": {"subscriptionPaymentIds": payment["_id"]}},
    )


_STEP_ACTIONS = {
    "classBookings": _increment_class_bookings,
    "trainerSlots": _decrement_trainer_slots,
    "subscription": _set_subscription,
}


async def _fulfill(db, payment: Dict[str, Any]) -> None:
    payment_id = payment["_id"]
    fulfillment = payment.get("fulfillment") or {}

    for step in FULFILLMENT_STEPS:
        if fulfillment.get(step):
            continue
        try:
            await _STEP_ACTIONS[step](db, payment)
            await db[PAYMENTS].update_one({"_id": payment_id}, {"$set": {f"fulfillment.{step}": True}})
        except PyMongoError as e:
            logger.exception(f"❌ Payment fulfillment step '{step}' failed for payment: {payment_id}")
            await db[PAYMENTS].update_one(
                {"_id": payment_id},
                {"$set": {"status": "incomplete", "failedStep": step, "error": str(e)}},
            )
            raise WorkflowError(
                f"Error saving payment info: {e}",
                context={"step": step, "paymentId": str(payment_id)},
            )
        fulfillment[step] = True

    await db[PAYMENTS].update_one(
        {"_id": payment_id},
        {"$set": {"status": "completed"}, "$unset": {"failedStep": "", "error": ""}},
    )


async def save_payment_info(db, info: Dict[str, Any]):
    """Record a confirmed payment and apply its booking side effects."""
    trainer_id = parse_object_id(info["trainerId"])
    slot_id = parse_object_id(info["slotId"])
    class_ids = [parse_object_id(class_id) for class_id in info.get("classesId") or []]
    await _check_references(db, trainer_id, slot_id, class_ids)

    payment = {
        "paymentId": info.get("paymentId"),
        "trainerName": info.get("trainerName"),
        "slotName": info.get("slotName"),
        "slotId": info["slotId"],
        "trainerId": info["trainerId"],
        "packageName": info.get("packageName"),
        "price": info.get("price"),
        "classesId": info.get("classesId") or [],
        "userName": info.get("userName"),
        "userEmail": info.get("userEmail"),
        "date": datetime.utcnow(),
        "status": "processing",
        "fulfillment": {step: False for step in FULFILLMENT_STEPS},
    }
    result = await db[PAYMENTS].insert_one(payment)
    payment["_id"] = result.inserted_id

    await _fulfill(db, payment)
    logger.info(f"✅ Payment saved for: {payment['userEmail']} (package: {payment['packageName']})")
    return result.inserted_id


async def reconcile_payment(db, payment_id: str) -> Dict[str, Any]:
    """Finish the fulfillment steps of an incomplete payment."""
    oid = parse_object_id(payment_id)
    payment = await db[PAYMENTS].find_one({"_id": oid})
    if not payment:
        raise NotFoundError("Payment not found.")

    # Payments recorded before fulfillment tracking carry no status
    if payment.get("status", "completed") != "completed":
        await _fulfill(db, payment)
        logger.info(f"🔧 Payment reconciled: {payment_id}")
    return await db[PAYMENTS].find_one({"_id": oid})


async def get_booking(db, user_email: str) -> Dict[str, Any]:
    """Latest booking for a member joined with its slot, trainer and classes."""
    bookings = await db[PAYMENTS].find({"userEmail": user_email}).sort("date", -1).limit(1).to_list(length=1)
    if not bookings:
        raise NotFoundError("Booking not found.")
    booking = bookings[0]

    slot = await db[SLOTS].find_one({"_id": parse_object_id(booking["slotId"])})
    trainer = await db[USERS].find_one({"_id": parse_object_id(booking["trainerId"])})
    class_ids = [parse_object_id(class_id) for class_id in booking.get("classesId") or []]
    classes = await db[CLASSES].find({"_id": {"$in": class_ids}}).to_list(length=None)

    return {
        "bookingResult": booking,
        "slotResult": slot,
        "trainerResult": trainer,
        "classResult": classes,
    }


async def financial_overview(db) -> Dict[str, Any]:
    latest = await db[PAYMENTS].find().sort("date", -1).limit(FINANCIAL_OVERVIEW_LIMIT).to_list(length=FINANCIAL_OVERVIEW_LIMIT)
    totals = await db[PAYMENTS].aggregate([
        {"$group": {"_id": None, "total": {"$sum": {"$toDouble": "$price"}}}}
    ]).to_list(length=None)
    balance = totals[0]["total"] if totals else 0
    return {"latestTransactions": latest, "totalBalance": balance}
