from fastapi import APIRouter, HTTPException, Depends
import logging

from api.auth import get_user, verify_admin, forget_role
from core.db import get_db
from core.exceptions import TrueFitError
from core.utils import normalize_email, serialize_doc, insert_result
from models.models import ApplicationIn, RejectRequest
from services import applications as workflow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/apply")
async def apply(application: ApplicationIn, user=Depends(get_user), db=Depends(get_db)):
    """Member applies to become a trainer"""
    try:
        result = await workflow.submit_application(db, application.model_dump(exclude_unset=True))
        return insert_result(result)
    except TrueFitError:
        raise
    except Exception as e:
        logger.error(f"Error submitting application: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error submitting application", "error": str(e)})


@router.get("/applications")
async def pending_applications(user=Depends(verify_admin), db=Depends(get_db)):
    return serialize_doc(await workflow.list_pending(db))


@router.get("/application/{email}")
async def application_for(email: str, db=Depends(get_db)):
    return serialize_doc(await workflow.get_application(db, normalize_email(email)))


@router.patch("/confirm/{email}")
async def confirm_application(email: str, user=Depends(verify_admin), db=Depends(get_db)):
    """Admin approves an application; the applicant becomes a trainer"""
    email = normalize_email(email)
    try:
        await workflow.approve_application(db, email)
        forget_role(email)
        return {"message": "Application approved and user updated successfully."}
    except TrueFitError:
        raise
    except Exception as e:
        logger.error(f"Error approving application for {email}: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error approving application", "error": str(e)})


@router.patch("/reject/{email}")
async def reject_application(email: str, body: RejectRequest, user=Depends(verify_admin), db=Depends(get_db)):
    """Admin rejects an application with feedback for the applicant"""
    email = normalize_email(email)
    try:
        await workflow.reject_application(db, email, body.adminFeedback)
        return {"message": "Application rejected successfully."}
    except TrueFitError:
        raise
    except Exception as e:
        logger.error(f"Error rejecting application for {email}: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error rejecting application", "error": str(e)})
