"""
Shared fixtures: in-memory SQLite store, FastAPI client, sample quizzes.
No network, Redis or Gemini access required.
"""

import os

os.environ.setdefault("LOG_LEVEL", "ERROR")
os.environ.pop("DATABASE_URL", None)
os.environ.pop("REDIS_URL", None)
os.environ.pop("GEMINI_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app as fastapi_app
from app.models import Quiz, QuizResult  # noqa: F401  registers tables
from app.utils.cache import cache_service
from app.utils.rate_limiter import rate_limiter


@pytest.fixture(autouse=True)
def reset_process_state():
    """Clear local cache and rate-limit counters around every test."""
    cache_service.local.clear()
    rate_limiter.reset_all()
    yield
    cache_service.local.clear()
    rate_limiter.reset_all()
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """Client whose store endpoints use the in-memory database."""

    def _get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = _get_db
    with TestClient(fastapi_app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def client_no_db():
    """Client with no store configured."""

    def _get_db():
        yield None

    fastapi_app.dependency_overrides[get_db] = _get_db
    with TestClient(fastapi_app, raise_server_exceptions=False) as c:
        yield c


def make_question(text="What organelle performs photosynthesis?", answer_index=1, **overrides):
    question = {
        "question": text,
        "options": ["Mitochondrion", "Chloroplast", "Ribosome", "Nucleus"],
        "answerIndex": answer_index,
        "explanation": "Chloroplasts contain chlorophyll.",
    }
    question.update(overrides)
    return question


@pytest.fixture
def sample_quiz():
    return {
        "topic": "Photosynthesis",
        "difficulty": "Medium",
        "questions": [
            make_question(),
            make_question(
                "Which gas is consumed during photosynthesis?",
                answer_index=2,
                options=["Oxygen", "Nitrogen", "Carbon dioxide", "Hydrogen"],
                explanation="Plants take in CO2 and release O2.",
            ),
            make_question(
                "Which pigment captures light energy?",
                answer_index=2,
                options=["Hemoglobin", "Carotene", "Chlorophyll", "Melanin"],
                explanation=None,
            ),
        ],
    }
