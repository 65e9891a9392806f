"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Form fields default to empty strings: required-field checks happen in the
service layer so each field gets its own message instead of a generic 422.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class GateState(str, Enum):
    auth = "auth"
    setup = "setup"
    main = "main"
    unavailable = "unavailable"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str

class UserResponse(BaseModel):
    user_id: str
    email: str


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileForm(BaseModel):
    """Setup and edit form. Interests are comma-separated text."""
    name: str = ""
    batch: str = ""
    branch: str = ""
    interests: str = ""

class ProfileResponse(BaseModel):
    id: str
    name: str
    batch: str
    branch: str
    interests: List[str] = []
    email: Optional[str] = None
    created_at: Optional[datetime] = None

class SessionResponse(BaseModel):
    state: GateState
    profile: Optional[ProfileResponse] = None
    detail: Optional[str] = None


# ============================================================
# DIRECTORY SCHEMAS
# ============================================================

class FilterOption(BaseModel):
    value: str
    label: str

class DirectoryResponse(BaseModel):
    users: List[ProfileResponse]
    total: int
    batch: str
    branch: str
    batches: List[FilterOption]
    branches: List[FilterOption]
    empty_state: Optional[str] = None


# ============================================================
# ALUMNI SCHEMAS
# ============================================================

class ContactLinks(BaseModel):
    email: str
    phone: Optional[str] = None
    linkedin: Optional[str] = None

class AlumniResponse(BaseModel):
    id: str
    name: str
    batch: str
    branch: str
    company: str
    position: str
    email: str
    phone: Optional[str] = None
    location: str
    experience: str
    linkedin: Optional[str] = None
    links: ContactLinks

class AlumniListResponse(BaseModel):
    alumni: List[AlumniResponse]
    total: int
    companies: List[str]
    branches: List[str]


# ============================================================
# Q&A SCHEMAS
# ============================================================

class QuestionCreate(BaseModel):
    question: str = ""

class AnswerCreate(BaseModel):
    answer: str = ""

class AnswerResponse(BaseModel):
    id: str
    answer: str
    answerer_name: str
    answerer_batch: str
    created_at: datetime

class QuestionResponse(BaseModel):
    id: str
    question: str
    asker_batch: str
    created_at: datetime
    answers: List[AnswerResponse] = []

class BoardPermissions(BaseModel):
    can_ask: bool = False
    can_answer: bool = False

class QuestionListResponse(BaseModel):
    questions: List[QuestionResponse]
    total: int
    permissions: BoardPermissions


# ============================================================
# CHAT SCHEMAS
# ============================================================

class MessageCreate(BaseModel):
    message: str = ""

class ChatMessage(BaseModel):
    id: str
    sender_id: str
    sender_name: str
    message: str
    timestamp: datetime

class ThreadSnapshot(BaseModel):
    """Full ordered state of a thread, as pushed to a live subscriber."""
    thread_id: str
    messages: List[ChatMessage]
    latest_message_id: Optional[str] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    title: str
    detail: str
    code: str
    field: Optional[str] = None
