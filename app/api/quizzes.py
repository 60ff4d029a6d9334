"""
Saved quiz API endpoints
"""

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Any, Optional
import logging

from app.database import get_db
from app.exceptions import InvalidRequestError, NotConfiguredError
from app.schemas.quiz import QuizSaveResponse, validate_quiz
from app.services.persistence_service import persistence_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.get("")
async def get_quizzes(id: Optional[str] = None, db: Optional[Session] = Depends(get_db)):
    """
    Get one saved quiz by id, or recent quizzes deduplicated by content

    - 404 if the id does not exist, 400 if it is malformed
    - Empty list when no store is configured
    """
    if db is None:
        return {"quizzes": []}

    if id:
        try:
            quiz = persistence_service.get_quiz(db, id)
        except InvalidRequestError:
            return JSONResponse(status_code=400, content={"quiz": None})
        if not quiz:
            return JSONResponse(status_code=404, content={"quiz": None})
        return {"quiz": quiz}

    try:
        quizzes = persistence_service.list_recent_quizzes(db)
    except Exception as e:
        logger.error(f"Failed to list quizzes: {str(e)}")
        quizzes = []

    return {"quizzes": quizzes}


@router.post("", response_model=QuizSaveResponse)
async def save_quiz(payload: Any = Body(...), db: Optional[Session] = Depends(get_db)):
    """
    Save a quiz for later review

    Idempotent: an identical (topic, difficulty, questions) payload
    returns the id of the already-stored quiz.
    """
    if db is None:
        raise NotConfiguredError("Database not configured")

    quiz = validate_quiz(payload)
    quiz_id = persistence_service.save_quiz(db, quiz)

    return QuizSaveResponse(ok=True, id=quiz_id)
