"""Core module - database connections, utilities, and configuration"""
from .db import (
    Database, database, get_db, ensure_indexes,
    USERS, SUBSCRIBERS, FORUMS, CLASSES, APPLICATIONS, SLOTS, PAYMENTS, REVIEWS
)
from .exceptions import TrueFitError, InvalidIdError, NotFoundError, ConflictError, WorkflowError
from .utils import create_jwt, decode_jwt, normalize_email, parse_object_id, serialize_doc

__all__ = [
    'Database', 'database', 'get_db', 'ensure_indexes',
    'USERS', 'SUBSCRIBERS', 'FORUMS', 'CLASSES', 'APPLICATIONS', 'SLOTS', 'PAYMENTS', 'REVIEWS',
    'TrueFitError', 'InvalidIdError', 'NotFoundError', 'ConflictError', 'WorkflowError',
    'create_jwt', 'decode_jwt', 'normalize_email', 'parse_object_id', 'serialize_doc'
]
