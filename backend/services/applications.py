"""
Trainer application workflow.

A member applies (Application stored as pending, User.status -> pending), an
admin then confirms or rejects. Both decisions copy profile fields from the
Application onto the User and delete the Application afterwards. The store
offers no transaction on a standalone deployment, so each multi-document step
is paired with a compensating write that undoes the earlier step when a later
one fails.
"""
import os
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pymongo.errors import PyMongoError

from core.db import APPLICATIONS, USERS
from core.exceptions import ConflictError, NotFoundError, WorkflowError
from models.models import Role, UserStatus

load_dotenv()

logger = logging.getLogger(__name__)

TRAINER_SLOT_QUOTA = int(os.getenv("TRAINER_SLOT_QUOTA", "10"))

# Fields copied onto the User when an application is confirmed
APPROVAL_FIELDS = (
    "photoURL", "fullName", "age", "aboutInfo", "linkedin", "instagram",
    "experience", "skills", "availableDays", "availableTime", "slots",
)


async def submit_application(db, applicant_data: Dict[str, Any]):
    """Store a pending application and mark the applicant's User as pending.

    A second submission while one is still pending raises ConflictError and
    writes nothing.
    """
    user_email = applicant_data.get("userEmail")
    existing = await db[APPLICATIONS].find_one({"userEmail": user_email, "status": "pending"})
    if existing:
        logger.warning(f"⚠️ Duplicate application rejected for: {user_email}")
        raise ConflictError("Application already pending for this user.")

    processed = {
        **applicant_data,
        "slots": TRAINER_SLOT_QUOTA,
        "status": "pending",
        "appliedAt": datetime.utcnow(),
        "adminFeedback": None,
    }
    result = await db[APPLICATIONS].insert_one(processed)

    try:
        await db[USERS].update_one({"email": user_email}, {"$set": {"status": UserStatus.pending.value}})
    except PyMongoError as e:
        logger.exception(f"❌ Failed to mark user pending, withdrawing application for: {user_email}")
        await db[APPLICATIONS].delete_one({"_id": result.inserted_id})
        raise WorkflowError(
            f"Error submitting application: {e}",
            context={"step": "mark_user_pending", "userEmail": user_email},
        )

    logger.info(f"📝 Application submitted for: {user_email}")
    return result


async def list_pending(db) -> List[Dict[str, Any]]:
    return await db[APPLICATIONS].find({"status": "pending"}).to_list(length=None)


async def get_application(db, user_email: str) -> Optional[Dict[str, Any]]:
    return await db[APPLICATIONS].find_one({"userEmail": user_email})


async def _find_application(db, user_email: str) -> Dict[str, Any]:
    application = await db[APPLICATIONS].find_one({"userEmail": user_email})
    if not application:
        logger.warning(f"⚠️ No application found for: {user_email}")
        raise NotFoundError("Application not found.")
    return application


async def _find_user(db, user_email: str) -> Dict[str, Any]:
    user = await db[USERS].find_one({"email": user_email})
    if not user:
        logger.warning(f"⚠️ Application decision for unknown user: {user_email}")
        raise NotFoundError("User not found.")
    return user


async def _restore_user(db, user: Dict[str, Any], changed_fields) -> None:
    """Put back the values the User had before a decision was applied."""
    to_set = {field: user[field] for field in changed_fields if field in user}
    to_unset = {field: "" for field in changed_fields if field not in user}
    restore = {}
    if to_set:
        restore["$set"] = to_set
    if to_unset:
        restore["$unset"] = to_unset
    await db[USERS].update_one({"email": user["email"]}, restore)
    logger.warning(f"↩️ Restored user fields after failed decision: {user['email']}")


async def _apply_decision(db, user: Dict[str, Any], application: Dict[str, Any], update: Dict[str, Any]) -> None:
    result = await db[USERS].update_one({"email": user["email"]}, {"$set": update})
    if result.matched_count == 0:
        raise NotFoundError("User not found.")

    try:
        await db[APPLICATIONS].delete_one({"_id": application["_id"]})
    except PyMongoError as e:
        logger.exception(f"❌ Failed to delete application for: {user['email']}")
        await _restore_user(db, user, update.keys())
        raise WorkflowError(
            f"Error completing application decision: {e}",
            context={"step": "delete_application", "userEmail": user["email"]},
        )


async def approve_application(db, user_email: str) -> None:
    """Promote the applicant to trainer and remove the application."""
    application = await _find_application(db, user_email)
    user = await _find_user(db, user_email)

    update = {field: application.get(field) for field in APPROVAL_FIELDS}
    update["role"] = Role.trainer.value
    update["status"] = UserStatus.approved.value

    await _apply_decision(db, user, application, update)
    logger.info(f"✅ Application approved for: {user_email}")


async def reject_application(db, user_email: str, admin_feedback: str) -> None:
    """Record the rejection and feedback on the User and remove the application."""
    application = await _find_application(db, user_email)
    user = await _find_user(db, user_email)

    update = {
        "displayName": application.get("fullName"),
        "age": application.get("age"),
        "photoURL": application.get("photoURL"),
        "status": UserStatus.rejected.value,
        "adminFeedback": admin_feedback,
    }

    await _apply_decision(db, user, application, update)
    logger.info(f"🚫 Application rejected for: {user_email}")
