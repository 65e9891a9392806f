"""
CampConnect - Main Application

FastAPI backend with:
- MongoDB for profiles, Q&A and messages
- JWT authentication
- WebSocket live chat threads

Run: uvicorn campconnect.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campconnect import __version__
from campconnect.api.routes import api_router
from campconnect.core.config import get_settings
from campconnect.core.errors import register_exception_handlers
from campconnect.core.logging_config import setup_logging
from campconnect.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="CampConnect",
    description="""
    Student networking backend.

    ## Features
    - **Session**: sign-in / profile setup / main app gate
    - **Profile**: setup and editing of your own profile
    - **Directory**: browse students by batch and branch
    - **Alumni**: browse alumni by company and branch
    - **Q&A**: juniors ask anonymously, seniors answer
    - **Chat**: one-to-one threads with live updates over WebSocket
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning(f"MongoDB index initialization failed: {e}")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "CampConnect", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
