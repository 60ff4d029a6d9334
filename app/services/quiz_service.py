"""
Quiz generation pipeline

cache lookup -> Wikipedia grounding -> prompt -> Gemini (JSON mode) ->
parse/repair -> normalize -> validate -> cache store
"""
import json
import logging
import re
from typing import Any, List, Optional

from app.config import settings
from app.exceptions import UpstreamUnparseableError
from app.schemas.quiz import QuizPayload, validate_quiz
from app.services.gemini_service import GeminiService, build_prompt, gemini_service
from app.services.retrieval_service import WikipediaService, wikipedia_service
from app.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def normalize_questions(raw: Any, options_per_question: int = None) -> List[dict]:
    """
    Coerce loosely-shaped model output into strict question dicts

    Items with empty question text, the wrong number of options or an
    out-of-range answerIndex are dropped, not repaired. Order is kept.
    """
    n_options = options_per_question or settings.OPTIONS_PER_QUESTION

    if not isinstance(raw, list):
        return []

    questions = []
    for item in raw:
        if not isinstance(item, dict):
            continue

        text = item.get("question")
        text = text.strip() if isinstance(text, str) else ""

        options = item.get("options")
        options = [str(o if o is not None else "").strip() for o in options] if isinstance(options, list) else []

        answer_index = item.get("answerIndex")
        answer_index = int(answer_index) if _is_integer(answer_index) else -1

        if not text or len(options) != n_options:
            continue
        if answer_index < 0 or answer_index >= n_options:
            continue

        question = {"question": text, "options": options, "answerIndex": answer_index}
        explanation = item.get("explanation")
        if isinstance(explanation, str):
            question["explanation"] = explanation
        questions.append(question)

    return questions


def parse_model_json(text: str) -> Any:
    """
    Parse model output, falling back to the outermost JSON array substring

    Raises:
        UpstreamUnparseableError: if neither attempt yields JSON
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        parsed = None
        match = _JSON_ARRAY.search(text or "")
        if match:
            try:
                parsed = json.loads(match.group(0))
            except ValueError:
                parsed = None

    # Falsy scalars (null, false, 0, "") carry no quiz; empty containers do parse
    if not parsed and not isinstance(parsed, (list, dict)):
        logger.error(f"Model returned non-JSON output: {(text or '')[:500]}")
        raise UpstreamUnparseableError("Model did not return JSON. Please try again.")

    return parsed


def quiz_cache_key(topic: str, difficulty: str) -> str:
    return f"quiz:{difficulty}:{topic.lower()}"


def clamp_question_count(requested: Optional[int]) -> int:
    count = requested if requested is not None else settings.MIN_QUESTIONS
    return max(settings.MIN_QUESTIONS, min(settings.MAX_QUESTIONS, count))


class QuizService:
    """Orchestrates quiz generation with caching and optional grounding"""

    def __init__(self, cache: CacheService, wikipedia: WikipediaService, gemini: GeminiService):
        self.cache = cache
        self.wikipedia = wikipedia
        self.gemini = gemini

    async def generate_quiz(
        self,
        topic: str,
        difficulty: str,
        use_retrieval: bool = True,
        num_questions: Optional[int] = None,
        force_fresh: bool = False
    ) -> dict:
        """
        Generate (or reuse) a quiz for a sanitized topic

        Args:
            topic: Sanitized topic
            difficulty: Easy/Medium/Hard
            use_retrieval: Ground the prompt with Wikipedia context
            num_questions: Requested count, clamped to configured bounds
            force_fresh: Delete any cached quiz and regenerate

        Returns:
            Validated quiz dict plus _cacheHit/_ambiguous/_assumedTitle/_usage

        Raises:
            UpstreamUnparseableError: model output is not JSON
            QuizValidationError: normalized quiz fails validation
            NotConfiguredError: model credential missing
        """
        cache_key = quiz_cache_key(topic, difficulty)

        # Cache handling: reuse unless a fresh quiz is requested
        if force_fresh:
            self.cache.delete(cache_key)
        else:
            cached = self.cache.get(cache_key)
            if cached:
                logger.info(f"Returning cached quiz for {cache_key}")
                return {**cached, "_cacheHit": True}

        assumed_title = None
        ambiguous = False
        context = None

        if use_retrieval:
            info = await self.wikipedia.fetch_page_info(topic)
            if info:
                assumed_title = info.title or None
                ambiguous = info.is_disambiguation
                context = info.extract
            if not context:
                context = await self.wikipedia.fetch_summary(topic)

        count = clamp_question_count(num_questions)
        prompt = build_prompt(assumed_title or topic, difficulty, context, count)

        logger.info(f"Generating {count} {difficulty} questions for {topic!r}")
        result = await self.gemini.generate_text_json(prompt)

        data = parse_model_json(result.text)

        chosen_title = None
        raw_questions = data
        if isinstance(data, dict):
            if isinstance(data.get("chosenTitle"), str):
                chosen_title = data["chosenTitle"]
            if isinstance(data.get("questions"), list):
                raw_questions = data["questions"]

        questions = normalize_questions(raw_questions)
        if len(questions) < count:
            logger.warning(f"Expected {count} questions, kept {len(questions)} after normalization")

        quiz: QuizPayload = validate_quiz({"topic": topic, "difficulty": difficulty, "questions": questions})
        payload = quiz.to_dict()

        self.cache.set(cache_key, payload, settings.QUIZ_CACHE_TTL)

        return {
            **payload,
            "_cacheHit": False,
            "_ambiguous": ambiguous,
            "_assumedTitle": chosen_title or assumed_title or None,
            "_usage": result.usage,
        }


# Global instance
quiz_service = QuizService(cache=cache_service, wikipedia=wikipedia_service, gemini=gemini_service)
