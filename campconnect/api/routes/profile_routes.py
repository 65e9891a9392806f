"""
Session & Profile Routes

GET /session - Which screen to show: auth, setup, main (or unavailable)
POST /profile - Create own profile (setup)
GET /profile - Get own profile
PUT /profile - Save edited profile
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials

from campconnect.core.auth import bearer_scheme, resolve_token, get_current_user, get_current_profile
from campconnect.core.errors import CampConnectError
from campconnect.schemas.schemas import ProfileForm, ProfileResponse, SessionResponse, GateState
from campconnect.services.gate_service import resolve_gate
from campconnect.services.profile_service import ProfileService, ProfileEditor

router = APIRouter(tags=["Profile"])


@router.get("/session", response_model=SessionResponse)
async def get_session(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)):
    """Resolve the gate state for the caller. One profile lookup, no retry."""
    try:
        user = resolve_token(credentials.credentials if credentials else None)
    except CampConnectError as e:
        return SessionResponse(state=GateState.unavailable, detail=e.message)
    return resolve_gate(user)


@router.post("/profile", response_model=ProfileResponse, status_code=201)
async def create_profile(form: ProfileForm, user: dict = Depends(get_current_user)):
    """Create the caller's profile. Every field is required."""
    return ProfileService().create(user, form)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(profile: dict = Depends(get_current_profile)):
    return profile


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(form: ProfileForm, profile: dict = Depends(get_current_profile)):
    """
    Save the edit form.

    Only name, batch, branch and interests are written; interests arrive as
    comma-separated text and are stored as a list with blanks dropped.
    """
    editor = ProfileEditor(profile)
    editor.begin_edit()
    editor.stage(form)
    return editor.save()
