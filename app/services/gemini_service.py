"""
Gemini AI service for quiz generation

- build_prompt: deterministic instruction document with the JSON output contract
- GeminiService.generate_text_json: JSON-mode generation returning raw text + token usage
"""
import google.generativeai as genai
from app.config import settings
from app.exceptions import NotConfiguredError
import logging
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = "You return only valid JSON."


def build_prompt(
    topic: str,
    difficulty: str,
    context: Optional[str] = None,
    num_questions: int = 5,
    options_per_question: int = None
) -> str:
    """
    Create the quiz generation prompt

    Args:
        topic: Topic or canonical page title; double quotes are escaped
        difficulty: Easy/Medium/Hard
        context: Optional encyclopedia extract, embedded verbatim
        num_questions: Exact number of questions to request
        options_per_question: Options per question (default from settings)

    Returns:
        Prompt text
    """
    n_options = options_per_question or settings.OPTIONS_PER_QUESTION
    safe_topic = topic.replace('"', '\\"')

    context_block = ""
    if context:
        context_block = f"""
Use ONLY the following context to ensure factual accuracy. If the context appears to be a disambiguation blurb (not a single-topic summary), ignore it. If context is insufficient, stick to widely accepted facts.

CONTEXT:
{context}
"""

    return f"""You are a precise quiz generator. Create exactly {num_questions} multiple-choice questions about the exact topic/sense: "{safe_topic}" at {difficulty} difficulty.
{context_block}
Rules:
- Output JSON only (no prose, no markdown).
- Treat the topic as the exact Wikipedia page title. If it has parentheses, that qualifier defines the sense.
- If the term is ambiguous and no qualifier is provided, choose ONE sense deterministically and proceed:
  - Prefer the Wikipedia primary topic if one exists.
  - Otherwise, use the most globally well-known sense in general knowledge.
  - If the provided CONTEXT clearly implies a sense, prefer that sense.
  - Do not ask for clarification; do not include any notes about the choice.
- Do NOT include facts from any other sense with the same word. Never mix senses.
- Do NOT mention or compare other senses.
- Each question item must be: {{ "question": string, "options": array of {n_options} strings, "answerIndex": 0-{n_options - 1}, "explanation": string }}.
- Exactly one correct option; others must be plausible but incorrect for THIS sense only.

Return a JSON object with this exact shape:
{{
  "chosenTitle": string, // the precise Wikipedia-like title for the chosen sense, e.g. "Mercury (planet)" or "Python (programming language)"
  "questions": [ ...items ]
}}"""


@dataclass
class ModelResponse:
    text: str
    usage: Optional[Dict[str, int]] = None


class GeminiService:
    """Service for Gemini JSON-mode generation"""

    def __init__(self, api_key: Optional[str] = None, model_name: str = None, max_output_tokens: int = None):
        self.api_key = api_key
        self.model_name = model_name or settings.GEMINI_MODEL
        self.max_output_tokens = max_output_tokens or settings.MAX_OUTPUT_TOKENS

        if self.api_key:
            genai.configure(api_key=self.api_key)

    def _get_model(self, model_name: str) -> "genai.GenerativeModel":
        return genai.GenerativeModel(
            model_name,
            system_instruction=SYSTEM_INSTRUCTION,
            generation_config=genai.GenerationConfig(
                temperature=0,
                response_mime_type="application/json",
                max_output_tokens=self.max_output_tokens,
            ),
        )

    async def generate_text_json(self, prompt: str, model: Optional[str] = None) -> ModelResponse:
        """
        Generate a JSON response for a prompt

        The text is returned unparsed; JSON mode only guarantees syntax,
        not our schema.

        Raises:
            NotConfiguredError: if GEMINI_API_KEY is not set
        """
        if not self.api_key:
            raise NotConfiguredError("Server misconfiguration: GEMINI_API_KEY is not set")

        model_name = model or self.model_name
        response = await self._get_model(model_name).generate_content_async(prompt)

        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = {
                "prompt": getattr(metadata, "prompt_token_count", 0) or 0,
                "completion": getattr(metadata, "candidates_token_count", 0) or 0,
                "total": getattr(metadata, "total_token_count", 0) or 0,
            }
            logger.info(f"Gemini usage ({model_name}): {usage}")

        return ModelResponse(text=response.text, usage=usage)


# Global instance
gemini_service = GeminiService(api_key=settings.GEMINI_API_KEY)
