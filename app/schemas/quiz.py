"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError
from typing import Annotated, Any, List, Literal, Optional

from app.exceptions import QuizValidationError

Difficulty = Literal["Easy", "Medium", "Hard"]
NonEmptyStr = Annotated[str, Field(min_length=1)]


class QuizGenerateRequest(BaseModel):
    """Request schema for quiz generation"""
    model_config = ConfigDict(populate_by_name=True)

    topic: str = Field(..., min_length=2, description="Quiz topic")
    difficulty: Difficulty = Field("Medium", description="Quiz difficulty")
    use_retrieval: bool = Field(True, alias="useRetrieval", description="Ground with a Wikipedia summary")
    num_questions: Optional[int] = Field(None, alias="numQuestions", description="Requested question count")
    force_fresh: bool = Field(False, alias="forceFresh", description="Skip and replace the cached quiz")


class QuizQuestion(BaseModel):
    """Individual multiple-choice question"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question: str = Field(..., min_length=3)
    options: List[NonEmptyStr] = Field(..., min_length=4, max_length=4)
    answer_index: StrictInt = Field(..., ge=0, le=3, alias="answerIndex")
    explanation: Optional[str] = None


class QuizPayload(BaseModel):
    """A validated quiz: topic, difficulty and at least one question"""
    model_config = ConfigDict(populate_by_name=True)

    topic: str = Field(..., min_length=1)
    difficulty: Difficulty
    questions: List[QuizQuestion] = Field(..., min_length=1)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class QuizSaveResponse(BaseModel):
    """Response after storing a quiz"""
    ok: bool = True
    id: str


def validate_quiz(payload: Any) -> QuizPayload:
    """
    Validate a quiz payload against the quiz and question rules

    Raises:
        QuizValidationError: if the payload is malformed
    """
    try:
        return QuizPayload.model_validate(payload)
    except ValidationError as e:
        raise QuizValidationError(f"Invalid quiz: {e.error_count()} validation error(s)") from e
