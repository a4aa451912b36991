from fastapi import APIRouter, HTTPException, Body, Depends, Header
from typing import Dict, Any, Optional, Tuple
import os
import time
import logging

from dotenv import load_dotenv

from core.db import get_db, USERS
from core.utils import create_jwt, decode_jwt, normalize_email
from models.models import Role

logger = logging.getLogger(__name__)

load_dotenv()
router = APIRouter()

# Roles are re-read from the Users collection, at most this many seconds stale
ROLE_CACHE_TTL_SECONDS = float(os.getenv("ROLE_CACHE_TTL_SECONDS", "30"))
ROLE_CACHE_MAX_ENTRIES = 1000

_role_cache: Dict[str, Tuple[str, float]] = {}


def clear_role_cache():
    _role_cache.clear()


def forget_role(email: Optional[str]) -> None:
    """Drop a cached role after that user's role was written."""
    if email:
        _role_cache.pop(normalize_email(email), None)


async def lookup_role(db, email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    email = normalize_email(email)
    if ROLE_CACHE_TTL_SECONDS > 0 and email in _role_cache:
        role, cached_at = _role_cache[email]
        if time.monotonic() - cached_at < ROLE_CACHE_TTL_SECONDS:
            return role
        del _role_cache[email]

    user = await db[USERS].find_one({"email": email}, {"role": 1})
    role = user.get("role") if user else None
    # Unknown emails are not cached; any caller can mint tokens for them
    if role is None or ROLE_CACHE_TTL_SECONDS <= 0:
        return role

    _role_cache[email] = (role, time.monotonic())

    # Keep only the newest entries
    if len(_role_cache) > ROLE_CACHE_MAX_ENTRIES:
        sorted_items = sorted(_role_cache.items(), key=lambda x: x[1][1])
        for key, _ in sorted_items[:len(_role_cache) - ROLE_CACHE_MAX_ENTRIES]:
            del _role_cache[key]
    return role


@router.post("/jwt")
async def issue_token(claims: Dict[str, Any] = Body(...)):
    """Sign the posted claims into a short-lived bearer token"""
    token = create_jwt(claims)
    return {"token": token}


def get_user(authorization: str = Header(None)):
    if not authorization:
        raise HTTPException(status_code=401, detail="Unauthorized Access")
    _, _, token = authorization.partition(" ")
    try:
        return decode_jwt(token)
    except Exception as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail="Unauthorized Access")


def require_role(role: str):
    async def verify(user=Depends(get_user), db=Depends(get_db)):
        if await lookup_role(db, user.get("email")) != role:
            raise HTTPException(status_code=403, detail="Forbidden Access")
        return user
    return verify


verify_admin = require_role(Role.admin.value)
verify_trainer = require_role(Role.trainer.value)
