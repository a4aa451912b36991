from fastapi import APIRouter, HTTPException, Body, Depends
from typing import Dict, Any
import logging

from api.auth import get_user, verify_admin
from core.db import get_db, REVIEWS, SUBSCRIBERS, USERS
from core.utils import serialize_doc, insert_result

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reviews")
async def add_review(review_data: Dict[str, Any] = Body(...), user=Depends(get_user), db=Depends(get_db)):
    result = await db[REVIEWS].insert_one(review_data)
    return insert_result(result)


@router.get("/reviews")
async def list_reviews(db=Depends(get_db)):
    return serialize_doc(await db[REVIEWS].find().to_list(length=None))


@router.get("/subscribers-vs-members")
async def subscribers_vs_members(user=Depends(verify_admin), db=Depends(get_db)):
    """Newsletter subscribers against members holding a paid package"""
    try:
        total_subscribers = await db[SUBSCRIBERS].count_documents({})
        total_paid_members = await db[USERS].count_documents({"subscription": {"$exists": True, "$ne": None}})
        return {"totalSubscribers": total_subscribers, "totalPaidMembers": total_paid_members}
    except Exception as e:
        logger.error(f"Error fetching subscribers vs members: {e}")
        raise HTTPException(status_code=500, detail={"message": "Internal server error", "error": str(e)})
