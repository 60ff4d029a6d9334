"""
Quiz model - stores saved quizzes for review
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from app.database import Base
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Quiz(Base):
    """
    Quizzes table - one row per distinct (topic, difficulty, questions)
    """
    __tablename__ = "quizzes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    topic = Column(String(255), nullable=False)
    difficulty = Column(String(20), nullable=False)
    questions = Column(JSONType, nullable=False)  # Full question data
    content_hash = Column(String(64), index=True, unique=True, nullable=False)  # For dedupe on save
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    def to_dict(self):
        return {
            "_id": str(self.id),
            "topic": self.topic,
            "difficulty": self.difficulty,
            "questions": self.questions,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Quiz(id={self.id}, topic={self.topic}, difficulty={self.difficulty})>"
