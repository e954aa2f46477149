import json
import logging
from typing import Any, Iterable, List, Tuple

from pydantic import ValidationError as PydanticValidationError

from pdfmind.core.errors import ParseError
from pdfmind.models.quiz import MAX_QUESTIONS, MIN_QUESTIONS, QuizQuestion
from pdfmind.utils.text_utils import strip_code_fences

logger = logging.getLogger(__name__)

QUIZ_CONTENT_LIMIT = 8000

QUIZ_PROMPT = """Based on the following PDF content, generate exactly {count} multiple choice questions in JSON format. Aim for a balanced mix across: easy, intermediate, advanced, logical, and mathematical (include mathematical only if the content warrants it).

For each question, provide:
- id: unique identifier (e.g., "easy1", "intermediate1", etc.)
- question: the question text
- options: array of 4 possible answers
- correctAnswer: index (0-3) of the correct answer
- difficulty: one of "easy", "intermediate", "advanced", "logical", "mathematical"
- explanation: brief explanation of why the answer is correct

PDF Content:
{content}

Return ONLY a JSON object with this structure:
{{
  "questions": [...],
  "hasMathContent": boolean
}}"""


def clamp_count(count: Any, default: int = 10) -> int:
    try:
        n = int(count)
    except (TypeError, ValueError):
        n = default
    if n < MIN_QUESTIONS:
        n = default if n == 0 else MIN_QUESTIONS
    return min(n, MAX_QUESTIONS)


def build_quiz_prompt(content: str, count: int) -> str:
    return QUIZ_PROMPT.format(count=count, content=(content or "")[:QUIZ_CONTENT_LIMIT])


def parse_quiz_payload(raw: str) -> Tuple[List[Any], bool]:
    """
    Décode la réponse texte du LLM -> (items bruts, hasMathContent).
    Lève ParseError si le JSON est invalide ou mal formé.
    """
    try:
        data = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON response from generative provider: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("questions", []), list):
        raise ParseError("Quiz payload must be an object with a 'questions' list")
    return data.get("questions") or [], bool(data.get("hasMathContent", False))


def _coerce_item(item: Any) -> QuizQuestion:
    if not isinstance(item, dict):
        raise ValueError("item is not an object")
    options = item.get("options")
    if not isinstance(options, list) or len(options) != 4:
        raise ValueError("exactly 4 options required")
    correct = item.get("correctAnswer")
    if isinstance(correct, bool) or not isinstance(correct, int):
        raise ValueError("correctAnswer must be an integer")
    raw_id = item.get("id")
    return QuizQuestion(
        id="" if raw_id is None else str(raw_id).strip(),
        question=str(item.get("question") or "").strip(),
        options=[str(o) for o in options],
        correctAnswer=correct,
        difficulty=str(item.get("difficulty") or "").strip().lower(),
        explanation=str(item.get("explanation") or "").strip(),
    )


def validate_questions(items: Iterable[Any], count: int) -> List[QuizQuestion]:
    """
    Garde les items valides (4 options, index 0..3, difficulté connue,
    explication non vide), dans l'ordre, tronqués à `count`.
    Les ids en double sont suffixés pour rester uniques.
    """
    out: List[QuizQuestion] = []
    seen = set()
    dropped = 0
    for item in items:
        try:
            q = _coerce_item(item)
        except (ValueError, PydanticValidationError) as e:
            dropped += 1
            logger.debug("dropping invalid quiz item: %s", e)
            continue
        if q.id in seen:
            k = len(out) + 1
            while f"{q.id}-{k}" in seen:
                k += 1
            q = q.model_copy(update={"id": f"{q.id}-{k}"})
        seen.add(q.id)
        out.append(q)
        if len(out) >= count:
            break

    if dropped:
        logger.warning("dropped %d invalid quiz item(s)", dropped)
    if not out:
        raise ParseError("No valid questions generated")
    return out
