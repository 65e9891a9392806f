"""
Q&A Routes

GET /questions - All questions (newest first) with answers, plus what the caller may do
POST /questions - Ask a question anonymously (juniors only)
POST /questions/{question_id}/answers - Answer a question (seniors only)
"""

import logging

from fastapi import APIRouter, Depends

from campconnect.core.auth import get_current_user, get_current_profile
from campconnect.core.errors import CampConnectError
from campconnect.schemas.schemas import (
    QuestionCreate, AnswerCreate, QuestionResponse, AnswerResponse, QuestionListResponse
)
from campconnect.services.profile_service import ProfileService
from campconnect.services.qa_service import QAService, board_permissions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["Q&A"])


@router.get("", response_model=QuestionListResponse)
async def list_questions(user: dict = Depends(get_current_user)):
    """
    The board. A failed profile lookup only hides the ask/answer controls;
    the questions still load.
    """
    try:
        profile = ProfileService().get(user["user_id"])
    except CampConnectError as e:
        logger.warning(f"Board permissions unavailable for {user['user_id']}: {e.message}")
        profile = None

    questions = QAService().list_questions()
    return QuestionListResponse(
        questions=questions,
        total=len(questions),
        permissions=board_permissions(profile),
    )


@router.post("", response_model=QuestionResponse, status_code=201)
async def ask_question(data: QuestionCreate, profile: dict = Depends(get_current_profile)):
    """Post a question. Only the asker's batch is recorded."""
    return QAService().ask(profile, data.question)


@router.post("/{question_id}/answers", response_model=AnswerResponse, status_code=201)
async def answer_question(question_id: str, data: AnswerCreate, profile: dict = Depends(get_current_profile)):
    return QAService().answer(profile, question_id, data.answer)
