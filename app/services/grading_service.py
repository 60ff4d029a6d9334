"""
Quiz grading service
MCQ only: exact match of the chosen option index against the answer key
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Sequence

logger = logging.getLogger(__name__)

UNANSWERED = -1


@dataclass
class QuizScore:
    correct: int
    total: int
    correctness: List[bool] = field(default_factory=list)
    answers: List[int] = field(default_factory=list)  # normalized to quiz length

    def as_dict(self) -> dict:
        return {"correct": self.correct, "total": self.total}


def _answer_key(question: Any) -> Any:
    """Correct option index from a question model or a stored dict"""
    if isinstance(question, dict):
        return question.get("answerIndex")
    return question.answer_index


def normalize_answers(answers: Sequence[Any], total: int) -> List[int]:
    """Pad/truncate answers to `total`; non-integers become unanswered"""
    answers = list(answers or [])
    normalized = []
    for i in range(total):
        value = answers[i] if i < len(answers) else UNANSWERED
        if not isinstance(value, int) or isinstance(value, bool):
            value = UNANSWERED
        normalized.append(value)
    return normalized


def score_quiz(questions: Sequence[Any], answers: Sequence[Any]) -> QuizScore:
    """
    Score a submission against the quiz answer key

    Args:
        questions: Quiz questions (QuizQuestion models or stored dicts)
        answers: Chosen option index per question, -1 for unanswered

    Returns:
        QuizScore with per-question correctness and totals
    """
    total = len(questions)
    normalized = normalize_answers(answers, total)

    # -1 never equals a valid index, so unanswered is always incorrect
    correctness = [normalized[i] == _answer_key(q) for i, q in enumerate(questions)]
    correct = sum(correctness)

    logger.debug(f"Quiz scored: {correct}/{total}")

    return QuizScore(correct=correct, total=total, correctness=correctness, answers=normalized)
