"""
Profile Service - the `users` collection.

One document per account, keyed by the account id:
{
    "_id": "<account id>",
    "name": "Asha Rao",
    "batch": "2nd year",
    "branch": "computer-science",
    "interests": ["Web Development", "AI/ML"],
    "email": "asha@example.com",
    "created_at": datetime
}

Created once at setup, edited only by its owner, never deleted.
"""

import logging
from typing import Optional, List, Dict

from pymongo.collection import Collection

from campconnect.core.errors import ValidationError, ConflictError
from campconnect.db.mongodb import get_collection, backend_call, serialize_doc, utcnow, COLLECTIONS
from campconnect.schemas.schemas import ProfileForm

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "batch", "branch", "interests")


# ============================================================
# INTERESTS
# ============================================================

def parse_interests(text: str) -> List[str]:
    """Split comma-separated interests, trim each, drop empties."""
    return [item.strip() for item in (text or "").split(",") if item.strip()]


def serialize_interests(interests: List[str]) -> str:
    return ", ".join(interests)


def validate_profile_form(form: ProfileForm, require_interests: bool = True) -> None:
    """
    Reject an incomplete form before anything is written.

    Setup requires interests; an edit may clear them.
    """
    if not form.name.strip():
        raise ValidationError("Name is required", "Please enter your full name", field="name")
    if not form.batch:
        raise ValidationError("Batch is required", "Please select your batch", field="batch")
    if not form.branch:
        raise ValidationError("Branch is required", "Please select your branch", field="branch")
    if require_interests and not form.interests.strip():
        raise ValidationError("Interests are required", "Please enter your interests", field="interests")


# ============================================================
# SERVICE
# ============================================================

class ProfileService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["users"])

    def get(self, user_id: str) -> Optional[dict]:
        """Fetch a profile by account id."""
        with backend_call("fetch profile"):
            doc = self.collection.find_one({"_id": user_id})
        return serialize_doc(doc)

    def list_all(self) -> List[dict]:
        with backend_call("fetch users"):
            docs = list(self.collection.find())
        return [serialize_doc(doc) for doc in docs]

    def create(self, user: dict, form: ProfileForm) -> dict:
        """
        Create the caller's profile from the setup form.

        Args:
            user: signed-in account ({"user_id", "email"})
            form: setup form, interests as comma-separated text

        Returns:
            The stored profile with `id`
        """
        validate_profile_form(form)

        doc = {
            "_id": user["user_id"],
            "name": form.name.strip(),
            "batch": form.batch,
            "branch": form.branch,
            "interests": parse_interests(form.interests),
            "email": user["email"],
            "created_at": utcnow(),
        }

        with backend_call("create profile"):
            if self.collection.find_one({"_id": user["user_id"]}, {"_id": 1}):
                raise ConflictError(
                    "Profile already exists. Use PUT to update.",
                    title="Profile creation failed",
                )
            self.collection.insert_one(doc)

        logger.info(f"Profile created for {user['user_id']}")
        return serialize_doc(doc)

    def update(self, user_id: str, fields: Dict) -> Dict:
        """Write only the editable fields. Returns what was written."""
        updated = {key: fields[key] for key in EDITABLE_FIELDS if key in fields}
        with backend_call("update profile"):
            self.collection.update_one({"_id": user_id}, {"$set": updated})
        return updated


# ============================================================
# EDITOR
# ============================================================

class ProfileEditor:
    """
    Edit-mode state for the owner's profile.

    `begin_edit` stages a copy of the editable fields, `cancel` throws the
    staged copy away without touching the backend, and `save` writes the four
    editable fields and merges them into the loaded profile.
    """

    def __init__(self, profile: dict, service: Optional[ProfileService] = None):
        self.profile = dict(profile)
        self.service = service
        self.editing = False
        self.form = self._form_from(self.profile)

    @staticmethod
    def _form_from(profile: dict) -> ProfileForm:
        return ProfileForm(
            name=profile.get("name", ""),
            batch=profile.get("batch", ""),
            branch=profile.get("branch", ""),
            interests=serialize_interests(profile.get("interests", [])),
        )

    def begin_edit(self) -> ProfileForm:
        self.editing = True
        self.form = self._form_from(self.profile)
        return self.form

    def stage(self, form: ProfileForm) -> None:
        if not self.editing:
            self.begin_edit()
        self.form = form.model_copy()

    def cancel(self) -> ProfileForm:
        self.form = self._form_from(self.profile)
        self.editing = False
        return self.form

    def save(self) -> dict:
        validate_profile_form(self.form, require_interests=False)
        service = self.service or ProfileService()
        updated = {
            "name": self.form.name,
            "batch": self.form.batch,
            "branch": self.form.branch,
            "interests": parse_interests(self.form.interests),
        }
        service.update(self.profile["id"], updated)

        self.profile.update(updated)
        self.editing = False
        self.form = self._form_from(self.profile)
        return self.profile
