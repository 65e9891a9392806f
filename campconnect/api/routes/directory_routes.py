"""
Directory Routes

GET /directory - Peer profiles, filtered by batch and branch
GET /alumni - Alumni records, filtered by company and branch
"""

from fastapi import APIRouter, Depends, Query

from campconnect.core.auth import get_current_user
from campconnect.schemas.schemas import DirectoryResponse, AlumniListResponse
from campconnect.services.directory_service import DirectoryService, ALL
from campconnect.services.alumni_service import AlumniService

router = APIRouter(tags=["Directory"])


@router.get("/directory", response_model=DirectoryResponse)
async def browse_directory(
    batch: str = Query(ALL, description='Batch label or "all"'),
    branch: str = Query(ALL, description='Branch code or "all"'),
    user: dict = Depends(get_current_user),
):
    """Everyone else's profile. The caller's own profile is left out."""
    return DirectoryService().browse(user["user_id"], batch=batch, branch=branch)


@router.get("/alumni", response_model=AlumniListResponse)
async def browse_alumni(
    company: str = Query(ALL, description='Company (substring, any case) or "all"'),
    branch: str = Query(ALL, description='Branch or "all"'),
    user: dict = Depends(get_current_user),
):
    return AlumniService().browse(company=company, branch=branch)
