"""
Authentication Routes

POST /auth/register - Register new account
POST /auth/login - Login and get JWT token
GET /auth/me - Get current account info
"""

from fastapi import APIRouter, Depends
from pymongo.errors import DuplicateKeyError

from campconnect.core.auth import hash_password, verify_password, create_access_token, get_current_user
from campconnect.core.errors import AuthenticationError, ConflictError
from campconnect.db.mongodb import get_collection, backend_call, utcnow, COLLECTIONS
from campconnect.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new account.

    After registration, login to get access token, then create profile.
    """
    accounts = get_collection(COLLECTIONS["accounts"])
    email = request.email.lower()

    with backend_call("register"):
        if accounts.find_one({"email": email}):
            raise ConflictError("Email already registered", title="Registration failed")
        try:
            accounts.insert_one({
                "email": email,
                "password_hash": hash_password(request.password),
                "created_at": utcnow(),
            })
        except DuplicateKeyError:
            raise ConflictError("Email already registered", title="Registration failed")

    return MessageResponse(message="Registered successfully. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with backend_call("login"):
        account = get_collection(COLLECTIONS["accounts"]).find_one({"email": request.email.lower()})

    if not account or not verify_password(request.password, account["password_hash"]):
        raise AuthenticationError("Invalid email or password")

    user_id = str(account["_id"])
    token = create_access_token(data={"sub": user_id})

    return TokenResponse(access_token=token, user_id=user_id)


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated account's info."""
    return UserResponse(user_id=user["user_id"], email=user["email"])
