"""
API module - FastAPI routers, one per screen.

Usage:
    from campconnect.api.routes import api_router
    app.include_router(api_router, prefix="/api")
"""
