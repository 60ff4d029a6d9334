"""
Topic sanitization for safe prompting and cache keys
"""
import re

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_ANGLE_BRACKETS = re.compile(r"[<>]")
_WHITESPACE = re.compile(r"\s+")

MIN_TOPIC_LENGTH = 2


def sanitize_topic(value: str, max_len: int = 60) -> str:
    """
    Clean a user-supplied topic string

    Trims, drops control characters and angle brackets, collapses
    whitespace and caps the length. Never raises.
    """
    s = str(value if value is not None else "")
    s = _CONTROL_CHARS.sub("", s)
    s = _ANGLE_BRACKETS.sub("", s)
    # Strip again after collapsing and after truncation
    s = _WHITESPACE.sub(" ", s).strip()
    if len(s) > max_len:
        s = s[:max_len].strip()
    return s


def is_topic_valid(value: str) -> bool:
    """True when the sanitized topic has at least two characters"""
    return len(sanitize_topic(value)) >= MIN_TOPIC_LENGTH
