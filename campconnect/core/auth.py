"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies resolving the signed-in account and its profile
"""

from datetime import datetime, timedelta
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from campconnect.core.config import get_settings
from campconnect.core.errors import AuthenticationError, ProfileRequiredError
from campconnect.db.mongodb import get_collection, backend_call, COLLECTIONS
from campconnect.services.profile_service import ProfileService

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor. Missing tokens are handled here, not by FastAPI,
# so the gate can answer "auth" instead of an error.
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def resolve_token(token: Optional[str]) -> Optional[dict]:
    """
    Turn a bearer token into the signed-in account, or None.

    Backend failures propagate; only a bad or stale token yields None.
    """
    if not token:
        return None

    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        return None

    try:
        account_id = ObjectId(payload["sub"])
    except InvalidId:
        return None

    with backend_call("verify session"):
        account = get_collection(COLLECTIONS["accounts"]).find_one({"_id": account_id})

    if not account:
        return None

    return {"user_id": str(account["_id"]), "email": account["email"]}


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[dict]:
    """FastAPI dependency - signed-in account or None."""
    return resolve_token(credentials.credentials if credentials else None)


async def get_current_user(user: Optional[dict] = Depends(get_optional_user)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if user is None:
        raise AuthenticationError()
    return user


async def get_current_profile(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require a profile document and return it with `id`."""
    profile = ProfileService().get(user["user_id"])
    if profile is None:
        raise ProfileRequiredError()
    return profile
