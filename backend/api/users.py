from fastapi import APIRouter, HTTPException, Body, Depends
from fastapi.responses import JSONResponse
from typing import Dict, Any
from datetime import datetime
import logging

from api.auth import get_user, verify_admin, forget_role
from core.db import get_db, USERS, SUBSCRIBERS
from core.exceptions import TrueFitError
from core.utils import normalize_email, parse_object_id, serialize_doc, insert_result, update_result
from models.models import Role, UserIn, UserProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

TOP_TRAINERS_LIMIT = 6


@router.post("/users")
async def save_user(user_in: UserIn, db=Depends(get_db)):
    """Create the user on first login; later logins only refresh the auth method"""
    users = db[USERS]
    try:
        existing_user = await users.find_one({"email": user_in.email})

        if existing_user:
            if existing_user.get("authMethod") != user_in.authMethod:
                now = datetime.utcnow()
                await users.update_one(
                    {"email": user_in.email},
                    {"$set": {"authMethod": user_in.authMethod, "updatedAt": now, "lastLogin": now}}
                )
            return JSONResponse(
                status_code=200,
                content={"message": "User already exists", "user": serialize_doc(existing_user)},
            )

        now = datetime.utcnow()
        new_user = {
            "email": user_in.email,
            "displayName": user_in.displayName,
            "photoURL": user_in.photoURL,
            "authMethod": user_in.authMethod,
            "role": Role.member.value,
            "createdAt": now,
            "lastLogin": now,
        }
        result = await users.insert_one(new_user)
        new_user["_id"] = result.inserted_id
        logger.info(f"➕ Created new user: {user_in.email}")
        return JSONResponse(
            status_code=201,
            content={"message": "User created successfully", "user": serialize_doc(new_user)},
        )
    except Exception as e:
        logger.error(f"Error saving user: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error saving user", "error": str(e)})


@router.patch("/users/{email}")
async def touch_last_login(email: str, db=Depends(get_db)):
    email = normalize_email(email)
    users = db[USERS]
    try:
        result = await users.update_one({"email": email}, {"$set": {"lastLogin": datetime.utcnow()}})
        if result.matched_count == 0:
            raise HTTPException(status_code=404, detail="User not found")

        user = await users.find_one({"email": email})
        return {
            "message": "User login time updated successfully",
            "result": update_result(result),
            "user": serialize_doc(user),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating user: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error updating user", "error": str(e)})


@router.get("/users/role/{email}")
async def get_user_role(email: str, user=Depends(get_user), db=Depends(get_db)):
    found = await db[USERS].find_one({"email": normalize_email(email)})
    if not found:
        raise HTTPException(status_code=404, detail="User not found")
    return {"role": found.get("role")}


@router.get("/users/{email}")
async def get_user_profile(email: str, db=Depends(get_db)):
    return serialize_doc(await db[USERS].find_one({"email": normalize_email(email)}))


@router.patch("/user/{email}")
async def update_user_profile(email: str, update_data: UserProfileUpdate, user=Depends(get_user), db=Depends(get_db)):
    """Partial profile update; only the fields present in the body are written"""
    email = normalize_email(email)
    updated_info = update_data.model_dump(exclude_unset=True)
    users = db[USERS]
    if updated_info:
        await users.update_one({"email": email}, {"$set": updated_info})
        if "role" in updated_info:
            forget_role(email)
    return serialize_doc(await users.find_one({"email": email}))


# ---------------- Subscribers ----------------

@router.post("/subscribers")
async def add_subscriber(data: Dict[str, Any] = Body(...), db=Depends(get_db)):
    result = await db[SUBSCRIBERS].insert_one(data)
    return insert_result(result)


@router.get("/subscribers")
async def list_subscribers(user=Depends(get_user), db=Depends(get_db)):
    subscribers = await db[SUBSCRIBERS].find().to_list(length=None)
    return serialize_doc(subscribers)


# ---------------- Trainers ----------------

@router.get("/trainers")
async def list_trainers(db=Depends(get_db)):
    trainers = await db[USERS].find({"role": Role.trainer.value}).to_list(length=None)
    return serialize_doc(trainers)


@router.get("/trainers/{trainer_id}")
async def get_trainer(trainer_id: str, db=Depends(get_db)):
    trainer = await db[USERS].find_one({"_id": parse_object_id(trainer_id)})
    return serialize_doc(trainer)


@router.patch("/trainers/{trainer_id}")
async def demote_trainer(trainer_id: str, user=Depends(verify_admin), db=Depends(get_db)):
    """Admin removes a trainer by demoting them back to member"""
    try:
        oid = parse_object_id(trainer_id)
        result = await db[USERS].update_one({"_id": oid}, {"$set": {"role": Role.member.value}})
        if result.matched_count:
            trainer = await db[USERS].find_one({"_id": oid}, {"email": 1})
            forget_role(trainer.get("email"))
            logger.info(f"⬇️ Trainer demoted to member: {trainer_id}")
        return update_result(result)
    except TrueFitError:
        raise
    except Exception as e:
        logger.error(f"Error demoting trainer: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error demoting trainer", "error": str(e)})


@router.get("/top-trainers")
async def top_trainers(db=Depends(get_db)):
    cursor = db[USERS].find({"role": Role.trainer.value}).sort("slots", 1).limit(TOP_TRAINERS_LIMIT)
    return serialize_doc(await cursor.to_list(length=TOP_TRAINERS_LIMIT))
