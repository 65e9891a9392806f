"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from campconnect.api.routes.auth_routes import router as auth_router
from campconnect.api.routes.profile_routes import router as profile_router
from campconnect.api.routes.directory_routes import router as directory_router
from campconnect.api.routes.qa_routes import router as qa_router
from campconnect.api.routes.chat_routes import router as chat_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(directory_router)
api_router.include_router(qa_router)
api_router.include_router(chat_router)
