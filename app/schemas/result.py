"""
Pydantic schemas for quiz result submission
"""
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from typing import Annotated, List

AnswerIndex = Annotated[StrictInt, Field(ge=-1, le=3)]


class ResultSubmission(BaseModel):
    """Answers for a stored quiz; -1 marks an unanswered question"""
    model_config = ConfigDict(populate_by_name=True)

    quiz_id: str = Field(..., alias="quizId")
    answers: List[AnswerIndex] = Field(..., min_length=1)


class ResultSaveResponse(BaseModel):
    """Response after storing a result"""
    ok: bool = True
    id: str
