"""
Directory Service - peer profiles filtered by batch and branch.

The full `users` collection is loaded once per request and filtered in
memory. Filtering is a pure projection: nothing about the selection is
stored, and "all" leaves a dimension unfiltered.
"""

import logging
from typing import List, Dict, Optional

from campconnect.schemas.schemas import DirectoryResponse, FilterOption, ProfileResponse
from campconnect.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

ALL = "all"

BATCH_OPTIONS = [
    FilterOption(value="1st year", label="1st Year"),
    FilterOption(value="2nd year", label="2nd Year"),
    FilterOption(value="3rd year", label="3rd Year"),
    FilterOption(value="4th year", label="4th Year"),
]

BRANCH_OPTIONS = [
    FilterOption(value="computer-science", label="Computer Science"),
    FilterOption(value="electrical", label="Electrical Engineering"),
    FilterOption(value="mechanical", label="Mechanical Engineering"),
    FilterOption(value="civil", label="Civil Engineering"),
    FilterOption(value="electronics", label="Electronics Engineering"),
    FilterOption(value="chemical", label="Chemical Engineering"),
]

NO_USERS_MESSAGE = "No users have created profiles yet."
NARROW_FILTERS_MESSAGE = 'Try adjusting your filters or select "All" to see all users.'


def filter_profiles(profiles: List[Dict], batch: str = ALL, branch: str = ALL) -> List[Dict]:
    filtered = profiles
    if batch != ALL:
        filtered = [p for p in filtered if p.get("batch") == batch]
    if branch != ALL:
        filtered = [p for p in filtered if p.get("branch") == branch]
    return filtered


def empty_state_message(loaded: List[Dict], filtered: List[Dict]) -> Optional[str]:
    """Tell "nobody here yet" apart from "filters too narrow"."""
    if filtered:
        return None
    if not loaded:
        return NO_USERS_MESSAGE
    return NARROW_FILTERS_MESSAGE


class DirectoryService:

    def __init__(self, profiles: Optional[ProfileService] = None):
        self.profiles = profiles or ProfileService()

    def load(self, viewer_id: str) -> List[Dict]:
        """Every profile except the viewer's own."""
        return [p for p in self.profiles.list_all() if p["id"] != viewer_id]

    def browse(self, viewer_id: str, batch: str = ALL, branch: str = ALL) -> DirectoryResponse:
        loaded = self.load(viewer_id)
        filtered = filter_profiles(loaded, batch, branch)
        logger.debug(f"Directory: {len(loaded)} loaded, {len(filtered)} after batch={batch} branch={branch}")

        return DirectoryResponse(
            users=[ProfileResponse(**p) for p in filtered],
            total=len(filtered),
            batch=batch,
            branch=branch,
            batches=BATCH_OPTIONS,
            branches=BRANCH_OPTIONS,
            empty_state=empty_state_message(loaded, filtered),
        )
