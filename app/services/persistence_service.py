"""
Quiz and result persistence

Quiz writes are idempotent: an identical (topic, difficulty, questions)
payload returns the existing id. Result writes always insert.
"""
import hashlib
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import InvalidRequestError, NotFoundError
from app.models import Quiz, QuizResult
from app.schemas.quiz import QuizPayload
from app.services.grading_service import score_quiz

logger = logging.getLogger(__name__)

RECENT_QUIZZES_LIMIT = 20
RECENT_RESULTS_LIMIT = 50


def parse_id(value: str) -> uuid.UUID:
    """Parse a document id, rejecting malformed values"""
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidRequestError(f"Malformed id: {value!r}")


def content_hash(topic: str, difficulty: str, questions: List[Dict[str, Any]]) -> str:
    """
    Hash of the exact quiz content, used for dedupe on save

    Same content -> same hash, independent of key order.
    """
    key_string = json.dumps(
        {"topic": topic, "difficulty": difficulty, "questions": questions},
        sort_keys=True,
        ensure_ascii=False,
    )
    return hashlib.sha256(key_string.encode()).hexdigest()


def content_signature(quiz: Dict[str, Any]) -> str:
    """
    Signature over the semantic fields shown in listings

    Ignores ids, timestamps and explanations so regenerated copies of the
    same quiz collapse into one entry.
    """
    try:
        return json.dumps({
            "topic": quiz.get("topic"),
            "difficulty": quiz.get("difficulty"),
            "questions": [
                {"q": q.get("question"), "a": q.get("answerIndex"), "opts": q.get("options")}
                for q in quiz.get("questions") or []
            ],
        }, sort_keys=True)
    except (TypeError, AttributeError):
        return f"{quiz.get('topic')}|{quiz.get('difficulty')}|{len(quiz.get('questions') or [])}"


class PersistenceService:
    """Reads and writes quiz/result documents through a SQLAlchemy session"""

    def _find_by_hash(self, db: Session, digest: str) -> Optional[Quiz]:
        return db.query(Quiz).filter(Quiz.content_hash == digest).first()

    def save_quiz(self, db: Session, quiz: QuizPayload) -> str:
        """
        Store a quiz, reusing the id of an identical stored quiz

        Returns:
            Quiz id as a string
        """
        payload = quiz.to_dict()
        digest = content_hash(payload["topic"], payload["difficulty"], payload["questions"])

        existing = self._find_by_hash(db, digest)
        if existing:
            logger.info(f"Quiz already stored: {existing.id}")
            return str(existing.id)

        record = Quiz(
            topic=payload["topic"],
            difficulty=payload["difficulty"],
            questions=payload["questions"],
            content_hash=digest,
        )

        try:
            db.add(record)
            db.commit()
            db.refresh(record)
        except IntegrityError:
            # A concurrent save stored the same content first
            db.rollback()
            existing = self._find_by_hash(db, digest)
            if not existing:
                raise
            logger.info(f"Quiz stored concurrently: {existing.id}")
            return str(existing.id)
        except Exception:
            db.rollback()
            raise

        logger.info(f"Quiz created: {record.id}")
        return str(record.id)

    def get_quiz(self, db: Session, quiz_id: str) -> Optional[Dict[str, Any]]:
        record = db.query(Quiz).filter(Quiz.id == parse_id(quiz_id)).first()
        return record.to_dict() if record else None

    def list_recent_quizzes(self, db: Session, limit: int = RECENT_QUIZZES_LIMIT) -> List[Dict[str, Any]]:
        """Newest quizzes first, near-duplicates removed"""
        records = db.query(Quiz).order_by(Quiz.created_at.desc()).limit(limit).all()

        seen = set()
        quizzes = []
        for record in records:
            doc = record.to_dict()
            signature = content_signature(doc)
            if signature in seen:
                continue
            seen.add(signature)
            quizzes.append(doc)

        return quizzes

    def save_result(self, db: Session, quiz_id: str, answers: List[int]) -> str:
        """
        Score a submission against its stored quiz and insert the result

        Raises:
            InvalidRequestError: malformed quiz id
            NotFoundError: quiz does not exist
        """
        quiz = db.query(Quiz).filter(Quiz.id == parse_id(quiz_id)).first()
        if not quiz:
            raise NotFoundError("Quiz not found")

        score = score_quiz(quiz.questions or [], answers)

        record = QuizResult(
            quiz_id=quiz.id,
            answers=score.answers,
            correctness=score.correctness,
            correct=score.correct,
            total=score.total,
        )

        try:
            db.add(record)
            db.commit()
            db.refresh(record)
        except Exception:
            db.rollback()
            raise

        logger.info(f"Result saved: {record.id}, score: {score.correct}/{score.total}")
        return str(record.id)

    def get_result(self, db: Session, result_id: str) -> Optional[Dict[str, Any]]:
        record = db.query(QuizResult).filter(QuizResult.id == parse_id(result_id)).first()
        return record.to_dict() if record else None

    def list_recent_results(self, db: Session, limit: int = RECENT_RESULTS_LIMIT) -> List[Dict[str, Any]]:
        """Newest results first, joined with quiz topic/difficulty"""
        rows = (
            db.query(QuizResult, Quiz)
            .outerjoin(Quiz, QuizResult.quiz_id == Quiz.id)
            .order_by(QuizResult.created_at.desc())
            .limit(limit)
            .all()
        )

        results = []
        for result, quiz in rows:
            doc = result.to_dict()
            doc["quizTopic"] = quiz.topic if quiz else None
            doc["quizDifficulty"] = quiz.difficulty if quiz else None
            doc["quizCreatedAt"] = quiz.created_at.isoformat() if quiz and quiz.created_at else None
            results.append(doc)

        return results


# Global instance
persistence_service = PersistenceService()
