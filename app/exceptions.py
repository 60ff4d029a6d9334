"""
Application error kinds and their HTTP status mapping
"""
from typing import Dict, Optional


class QuizAppError(Exception):
    """Base class for errors the HTTP layer maps to a response"""

    status_code = 500

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers


class InvalidRequestError(QuizAppError):
    """Malformed or missing input fields"""
    status_code = 400


class QuizValidationError(QuizAppError):
    """Quiz payload failed structural validation"""
    status_code = 400


class RateLimitedError(QuizAppError):
    """Client exceeded its request budget"""
    status_code = 429


class UpstreamUnparseableError(QuizAppError):
    """Model output could not be parsed as JSON"""
    status_code = 502


class NotConfiguredError(QuizAppError):
    """A required external dependency is not configured"""
    status_code = 503


class NotFoundError(QuizAppError):
    """Referenced entity does not exist"""
    status_code = 404
