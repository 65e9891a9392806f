"""
Session gate - decides which top-level screen a client shows.

    no session            -> auth
    session, no profile   -> setup
    session, profile      -> main
    profile fetch failed  -> unavailable

A failed fetch is reported as its own state. Treating it as "no profile"
would send an existing user back to profile setup during an outage.
"""

import logging
from typing import Optional

from campconnect.core.errors import CampConnectError
from campconnect.schemas.schemas import GateState, SessionResponse, ProfileResponse
from campconnect.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def resolve_gate(user: Optional[dict], service: Optional[ProfileService] = None) -> SessionResponse:
    if user is None:
        return SessionResponse(state=GateState.auth)

    try:
        profile = (service or ProfileService()).get(user["user_id"])
    except CampConnectError as e:
        logger.warning(f"Profile check failed for {user['user_id']}: {e.message}")
        return SessionResponse(state=GateState.unavailable, detail=e.message)

    if profile is None:
        return SessionResponse(state=GateState.setup)

    return SessionResponse(state=GateState.main, profile=ProfileResponse(**profile))
