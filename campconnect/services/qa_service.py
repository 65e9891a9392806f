"""
Q&A Service - anonymous questions, attributed answers.

Collections:
1. questions - {"question", "asker_batch", "created_at"}
2. answers   - {"question_id", "answer", "answerer_name", "answerer_batch", "created_at"}

RULES:
- Only batch "junior" may ask; only batch "senior" may answer.
- A question never records who asked it, only the asker's batch.
- An answer records the answerer's name and batch.
- Nothing is edited or deleted.
"""

import logging
from typing import Optional, List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from campconnect.core.errors import ValidationError, PermissionDeniedError, NotFoundError
from campconnect.db.mongodb import get_collection, backend_call, serialize_doc, utcnow, COLLECTIONS
from campconnect.schemas.schemas import BoardPermissions

logger = logging.getLogger(__name__)

ASKER_BATCH = "junior"
ANSWERER_BATCH = "senior"


def board_permissions(profile: Optional[dict]) -> BoardPermissions:
    """What the board shows this viewer: the ask form, answer inputs, or neither."""
    batch = profile.get("batch") if profile else None
    return BoardPermissions(
        can_ask=batch == ASKER_BATCH,
        can_answer=batch == ANSWERER_BATCH,
    )


class QAService:

    def __init__(self):
        self.questions: Collection = get_collection(COLLECTIONS["questions"])
        self.answers: Collection = get_collection(COLLECTIONS["answers"])

    def list_questions(self) -> List[dict]:
        """
        All questions, newest first, each with its answers oldest first.

        Answers are fetched per question, one query each.
        """
        with backend_call("fetch questions"):
            questions = list(self.questions.find().sort("created_at", DESCENDING))

            result = []
            for doc in questions:
                answers = self.answers.find({"question_id": doc["_id"]}).sort(
                    [("created_at", ASCENDING), ("_id", ASCENDING)]
                )
                question = serialize_doc(doc)
                question["answers"] = [self._serialize_answer(a) for a in answers]
                result.append(question)

        return result

    def ask(self, profile: dict, text: str) -> dict:
        """
        Post a question anonymously.

        Only the asker's batch is stored, never their id, name or email.
        """
        if not text.strip():
            raise ValidationError("Question is required", "Please enter your question", field="question")
        if profile.get("batch") != ASKER_BATCH:
            raise PermissionDeniedError("Only juniors can ask questions.", title="Failed to post question")

        doc = {
            "question": text,
            "asker_batch": profile["batch"],
            "created_at": utcnow(),
        }
        with backend_call("post question"):
            self.questions.insert_one(doc)

        logger.info("Question posted anonymously")
        question = serialize_doc(doc)
        question["answers"] = []
        return question

    def answer(self, profile: dict, question_id: str, text: str) -> dict:
        if not text.strip():
            raise ValidationError("Answer is required", "Please enter your answer", field="answer")
        if profile.get("batch") != ANSWERER_BATCH:
            raise PermissionDeniedError("Only seniors can answer questions.", title="Failed to post answer")

        try:
            parent_id = ObjectId(question_id)
        except InvalidId:
            raise NotFoundError("Question")

        with backend_call("post answer"):
            if not self.questions.find_one({"_id": parent_id}, {"_id": 1}):
                raise NotFoundError("Question")

            doc = {
                "question_id": parent_id,
                "answer": text,
                "answerer_name": profile["name"],
                "answerer_batch": profile["batch"],
                "created_at": utcnow(),
            }
            self.answers.insert_one(doc)

        logger.info(f"Answer posted on question {question_id} by {profile['id']}")
        return self._serialize_answer(doc)

    @staticmethod
    def _serialize_answer(doc: dict) -> dict:
        answer = serialize_doc(doc)
        answer.pop("question_id", None)
        return answer
