from fastapi import APIRouter, HTTPException, Body, Depends, Query
from typing import Dict, Any
import math
import logging

from api.auth import get_user, verify_trainer
from core.db import get_db, FORUMS
from core.exceptions import TrueFitError
from core.utils import parse_object_id, serialize_doc, insert_result, update_result

logger = logging.getLogger(__name__)

router = APIRouter()

POSTS_PER_PAGE = 6


@router.post("/forum")
async def create_post(forum_data: Dict[str, Any] = Body(...), user=Depends(get_user), db=Depends(get_db)):
    result = await db[FORUMS].insert_one(forum_data)
    return insert_result(result)


@router.get("/forum")
async def list_posts(page: int = Query(1, ge=1), db=Depends(get_db)):
    """Paginated forum posts, newest first"""
    skip = (page - 1) * POSTS_PER_PAGE
    try:
        total_posts = await db[FORUMS].count_documents({})
        cursor = db[FORUMS].find().sort("postedDate", -1).skip(skip).limit(POSTS_PER_PAGE)
        posts = await cursor.to_list(length=POSTS_PER_PAGE)
        return {
            "totalPosts": total_posts,
            "currentPage": page,
            "totalPages": math.ceil(total_posts / POSTS_PER_PAGE),
            "posts": serialize_doc(posts),
        }
    except Exception as e:
        logger.error(f"Error retrieving forums: {e}")
        raise HTTPException(status_code=500, detail={"message": "Error retrieving forums", "error": str(e)})


@router.get("/trainer-forum")
async def trainer_posts(user=Depends(verify_trainer), db=Depends(get_db)):
    posts = await db[FORUMS].find({"authorType": "trainer"}).to_list(length=None)
    return serialize_doc(posts)


async def _vote(db, post_id: str, field: str, label: str, verb: str):
    try:
        result = await db[FORUMS].update_one({"_id": parse_object_id(post_id)}, {"$inc": {field: 1}})
        return {"message": f"{label} successful", "result": update_result(result)}
    except TrueFitError:
        raise
    except Exception as e:
        logger.error(f"Error {verb} post {post_id}: {e}")
        raise HTTPException(status_code=500, detail={"message": f"Error {verb}", "error": str(e)})


@router.patch("/forum/upvote/{post_id}")
async def upvote(post_id: str, user=Depends(get_user), db=Depends(get_db)):
    return await _vote(db, post_id, "upvotes", "Upvote", "upvoting")


@router.patch("/forum/downvote/{post_id}")
async def downvote(post_id: str, user=Depends(get_user), db=Depends(get_db)):
    return await _vote(db, post_id, "downvotes", "Downvote", "downvoting")
