from pydantic import BaseModel, ConfigDict, EmailStr
from typing import List, Optional, Any
from enum import Enum


class Role(str, Enum):
    member = "member"
    trainer = "trainer"
    admin = "admin"


class UserStatus(str, Enum):
    none = "none"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class UserIn(BaseModel):
    email: EmailStr
    displayName: Optional[str] = None
    photoURL: Optional[str] = None
    authMethod: Optional[str] = None


class UserProfileUpdate(BaseModel):
    # Profile documents are free-form; unknown fields are stored as sent
    model_config = ConfigDict(extra="allow")

    displayName: Optional[str] = None
    photoURL: Optional[str] = None
    fullName: Optional[str] = None
    age: Optional[Any] = None
    aboutInfo: Optional[str] = None
    skills: Optional[List[Any]] = None


class ApplicationIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    userEmail: EmailStr
    fullName: Optional[str] = None
    photoURL: Optional[str] = None
    age: Optional[Any] = None
    aboutInfo: Optional[str] = None
    experience: Optional[Any] = None
    skills: Optional[List[Any]] = None
    availableDays: Optional[List[Any]] = None
    availableTime: Optional[Any] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


class RejectRequest(BaseModel):
    adminFeedback: str


class SelectedClass(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: str
    label: Optional[str] = None


class SlotIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    trainerId: str
    slotName: Optional[str] = None
    selectedClasses: List[SelectedClass] = []


class PaymentIntentRequest(BaseModel):
    amount: int


class PaymentInfo(BaseModel):
    paymentId: str
    trainerName: Optional[str] = None
    slotName: Optional[str] = None
    slotId: str
    trainerId: str
    packageName: str
    price: Any = None
    classesId: List[str] = []
    userName: Optional[str] = None
    userEmail: EmailStr
