"""
Quiz generation API endpoint
"""
from fastapi import APIRouter, Body, Request
from pydantic import ValidationError
from typing import Any
import logging

from app.config import settings
from app.exceptions import InvalidRequestError, RateLimitedError
from app.schemas.quiz import QuizGenerateRequest
from app.services.quiz_service import quiz_service
from app.utils.rate_limiter import get_client_id, rate_limit
from app.utils.sanitize import is_topic_valid, sanitize_topic

router = APIRouter(prefix="/api", tags=["generate"])
logger = logging.getLogger(__name__)

RATE_LIMIT_BUCKET = "generate-quiz"


@router.post("/generate-quiz")
async def generate_quiz(request: Request, payload: Any = Body(None)):
    """
    Generate a multiple-choice quiz for a topic using Gemini

    - Per-client rate limit (fixed window), counted before the body is validated
    - Checks cache first (1-hour TTL) unless forceFresh
    - Optionally grounds the prompt with a Wikipedia summary
    - Returns the validated quiz plus _cacheHit/_ambiguous/_assumedTitle/_usage
    """

    limit = rate_limit(
        get_client_id(request),
        RATE_LIMIT_BUCKET,
        settings.GENERATE_RATE_LIMIT,
        settings.GENERATE_RATE_WINDOW,
    )
    if not limit.allowed:
        raise RateLimitedError(
            "Too many requests. Please try again shortly.",
            headers=limit.headers(settings.GENERATE_RATE_LIMIT),
        )

    try:
        body = QuizGenerateRequest.model_validate(payload)
    except ValidationError:
        raise InvalidRequestError("Invalid request")

    topic = sanitize_topic(body.topic)
    if not is_topic_valid(topic):
        raise InvalidRequestError("Please provide a more specific topic.")

    return await quiz_service.generate_quiz(
        topic=topic,
        difficulty=body.difficulty,
        use_retrieval=body.use_retrieval,
        num_questions=body.num_questions,
        force_fresh=body.force_fresh,
    )
