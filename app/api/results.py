"""
Quiz result submission and review API endpoints
"""
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Any, Optional
import logging

from app.database import get_db
from app.exceptions import InvalidRequestError, NotConfiguredError
from app.schemas.result import ResultSaveResponse, ResultSubmission
from app.services.persistence_service import persistence_service

router = APIRouter(prefix="/api/results", tags=["results"])
logger = logging.getLogger(__name__)


@router.post("", response_model=ResultSaveResponse)
async def submit_result(payload: Any = Body(...), db: Optional[Session] = Depends(get_db)):
    """
    Score and store a quiz submission

    - answers: option index per question, -1 for unanswered
    - Answers are padded/truncated to the quiz length before scoring
    """
    if db is None:
        raise NotConfiguredError("Database not configured")

    try:
        submission = ResultSubmission.model_validate(payload)
    except ValidationError:
        raise InvalidRequestError("Invalid payload")

    result_id = persistence_service.save_result(db, submission.quiz_id, submission.answers)

    return ResultSaveResponse(ok=True, id=result_id)


@router.get("")
async def get_results(id: Optional[str] = None, db: Optional[Session] = Depends(get_db)):
    """
    Get one result by id, or recent results joined with quiz metadata
    """
    if db is None:
        return {"results": []}

    if id:
        try:
            result = persistence_service.get_result(db, id)
        except InvalidRequestError:
            return JSONResponse(status_code=400, content={"result": None})
        if not result:
            return JSONResponse(status_code=404, content={"result": None})
        return {"result": result}

    try:
        results = persistence_service.list_recent_results(db)
    except Exception as e:
        logger.error(f"Failed to list results: {str(e)}")
        results = []

    return {"results": results}
