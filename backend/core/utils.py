import jwt, os
from datetime import datetime, timedelta
from bson import ObjectId
from bson.errors import InvalidId
from dotenv import load_dotenv
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from core.exceptions import InvalidIdError

load_dotenv()

JWT_ALGO = os.getenv("JWT_ALGO", "HS256")
JWT_EXP_MIN = int(os.getenv("JWT_EXP_MIN", "60"))


def _jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set. Please set it in your .env file or environment.")
    return secret


def create_jwt(payload: dict):
    claims = dict(payload)
    claims["exp"] = datetime.utcnow() + timedelta(minutes=JWT_EXP_MIN)
    return jwt.encode(claims, _jwt_secret(), algorithm=JWT_ALGO)


def decode_jwt(token: str):
    return jwt.decode(token, _jwt_secret(), algorithms=[JWT_ALGO])


def parse_object_id(value) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdError(f"Invalid id: {value}")


def normalize_email(value):
    """Canonical form of an address, as EmailStr stores it (domain lowercased)."""
    if not value:
        return value
    try:
        return validate_email(value)[1]
    except PydanticCustomError:
        # Not an address; lookups by it simply match nothing
        return value


def serialize_doc(obj):
    """Recursively convert ObjectId and datetime values for JSON responses."""
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: serialize_doc(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [serialize_doc(item) for item in obj]
    return obj


def insert_result(result) -> dict:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result) -> dict:
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
    }


def delete_result(result) -> dict:
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}
