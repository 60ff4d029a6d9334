"""
QuizResult model - stores scored quiz submissions
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Uuid
from app.database import Base
from app.models.quiz import JSONType, utcnow
import uuid


class QuizResult(Base):
    """
    Quiz results table - one row per submission, never updated
    """
    __tablename__ = "quiz_results"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid(as_uuid=True), ForeignKey("quizzes.id"), nullable=False, index=True)
    answers = Column(JSONType, nullable=False)  # Padded to quiz length, -1 = unanswered
    correctness = Column(JSONType, nullable=False)  # Parallel list of booleans
    correct = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    def to_dict(self):
        return {
            "_id": str(self.id),
            "quizId": str(self.quiz_id),
            "answers": self.answers,
            "correctness": self.correctness,
            "score": {"correct": self.correct, "total": self.total},
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<QuizResult(quiz_id={self.quiz_id}, score={self.correct}/{self.total})>"
