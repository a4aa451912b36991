"""Models module - Pydantic models for API requests and responses"""
from .models import (
    Role, UserStatus,
    UserIn, UserProfileUpdate,
    ApplicationIn, RejectRequest,
    SelectedClass, SlotIn,
    PaymentIntentRequest, PaymentInfo
)

__all__ = [
    'Role', 'UserStatus',
    'UserIn', 'UserProfileUpdate',
    'ApplicationIn', 'RejectRequest',
    'SelectedClass', 'SlotIn',
    'PaymentIntentRequest', 'PaymentInfo'
]
