from fastapi import APIRouter, HTTPException, Body, Depends, Query
from typing import Dict, Any
import math
import re
import logging

from api.auth import get_user, verify_trainer
from core.db import get_db, CLASSES, SLOTS
from core.exceptions import NotFoundError, TrueFitError
from core.utils import parse_object_id, serialize_doc, insert_result, update_result, delete_result
from models.models import SlotIn

logger = logging.getLogger(__name__)

router = APIRouter()

TOP_CLASSES_LIMIT = 6


# ---------------- Classes ----------------

@router.post("/classes")
async def create_class(class_data: Dict[str, Any] = Body(...), user=Depends(get_user), db=Depends(get_db)):
    result = await db[CLASSES].insert_one(class_data)
    return insert_result(result)


@router.get("/classes")
async def list_classes(
    page: int = Query(1, ge=1),
    limit: int = Query(6, ge=1),
    search: str = "",
    db=Depends(get_db),
):
    """Paginated class list with case-insensitive name search"""
    search_filter = {"className": {"$regex": re.escape(search), "$options": "i"}} if search else {}
    try:
        total_count = await db[CLASSES].count_documents(search_filter)
        cursor = db[CLASSES].find(search_filter).skip((page - 1) * limit).limit(limit)
        classes = await cursor.to_list(length=limit)
        return {
            "classes": serialize_doc(classes),
            "totalPages": math.ceil(total_count / limit),
            "currentPage": page,
        }
    except Exception as e:
        logger.error(f"Error fetching classes: {e}")
        raise HTTPException(status_code=500, detail={"message": "Internal server error", "error": str(e)})


@router.get("/top-classes")
async def top_classes(db=Depends(get_db)):
    try:
        cursor = db[CLASSES].find().sort("bookings", -1).limit(TOP_CLASSES_LIMIT)
        return serialize_doc(await cursor.to_list(length=TOP_CLASSES_LIMIT))
    except Exception as e:
        logger.error(f"Error fetching classes: {e}")
        raise HTTPException(status_code=500, detail={"message": "Internal server error", "error": str(e)})


@router.get("/all-classes")
async def all_classes(db=Depends(get_db)):
    return serialize_doc(await db[CLASSES].find().to_list(length=None))


# ---------------- Slots ----------------

@router.post("/add-slot")
async def add_slot(slot: SlotIn, user=Depends(verify_trainer), db=Depends(get_db)):
    """Trainer publishes a slot; the referenced classes are tagged with the trainer id"""
    try:
        class_ids = list({parse_object_id(selected.value) for selected in slot.selectedClasses})
        if class_ids:
            found = await db[CLASSES].count_documents({"_id": {"$in": class_ids}})
            if found != len(class_ids):
                raise NotFoundError("Class not found.")

        result = await db[SLOTS].insert_one(slot.model_dump())
        update_class = await db[CLASSES].update_many(
            {"_id": {"$in": class_ids}},
            {"$addToSet": {"trainerId": slot.trainerId}}
        )
        logger.info(f"🗓️ Slot {result.inserted_id} added by trainer {slot.trainerId} for {len(class_ids)} classes")
        return update_result(update_class)
    except TrueFitError:
        raise
    except Exception as e:
        logger.error(f"Error adding slot: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error adding slot", "error": str(e)})


@router.get("/slots/{trainer_id}")
async def trainer_slots(trainer_id: str, db=Depends(get_db)):
    slots = await db[SLOTS].find({"trainerId": trainer_id}).to_list(length=None)
    return serialize_doc(slots)


@router.delete("/slots/{slot_id}")
async def delete_slot(slot_id: str, user=Depends(verify_trainer), db=Depends(get_db)):
    result = await db[SLOTS].delete_one({"_id": parse_object_id(slot_id)})
    return delete_result(result)


@router.get("/slot/{slot_id}")
async def get_slot(slot_id: str, db=Depends(get_db)):
    return serialize_doc(await db[SLOTS].find_one({"_id": parse_object_id(slot_id)}))
