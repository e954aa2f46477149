"""
Fonctions hébergées : proxy côté serveur vers les fournisseurs.

Le client ne connaît pas les clés ; elles sont injectées ici depuis la config.
Réponses au format {…, success: true} ou {error, success: false}.
"""
import base64
import binascii
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pdfmind.core.deps import get_orchestrator
from pdfmind.core.errors import StageError
from pdfmind.core.security import get_api_key
from pdfmind.models.functions import (
    AnswerFunctionRequest,
    AnswerFunctionResponse,
    ExtractFunctionRequest,
    ExtractFunctionResponse,
    QuizFunctionRequest,
    QuizFunctionResponse,
)
from pdfmind.services.answers import build_answer_prompt
from pdfmind.services.orchestrator import Orchestrator
from pdfmind.services.quiz_gen import build_quiz_prompt, clamp_count, parse_quiz_payload, validate_questions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"], dependencies=[Depends(get_api_key)])

FUNCTION_PAGES = "1-50"
FUNCTION_ANSWER_LIMIT = 10000


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "success": False})


@router.post("/extract-pdf-text", response_model=ExtractFunctionResponse)
async def extract_pdf_text(body: ExtractFunctionRequest, orchestrator: Orchestrator = Depends(get_orchestrator)):
    if not body.fileData or not body.fileName:
        return _error("Missing fileData or fileName", 400)
    if not orchestrator.pdfco.configured:
        return _error("PDF.co API key not configured", 500)

    try:
        data = base64.b64decode(body.fileData, validate=True)
    except (binascii.Error, ValueError):
        return _error("fileData is not valid base64", 400)

    logger.info("extract-pdf-text: %s (%d bytes)", body.fileName, len(data))
    try:
        text = await orchestrator.pdfco.extract_text(data, body.fileName, pages=FUNCTION_PAGES)
    except StageError as e:
        logger.error("PDF extraction error: %s", e)
        return _error(str(e), 500)
    return ExtractFunctionResponse(text=text)


@router.post("/answer-pdf-question", response_model=AnswerFunctionResponse)
async def answer_pdf_question(body: AnswerFunctionRequest, orchestrator: Orchestrator = Depends(get_orchestrator)):
    if not body.question or not body.pdfContent:
        return _error("Missing question or pdfContent", 400)
    if not orchestrator.llm.configured:
        return _error("Generative provider API key not configured", 500)

    prompt = build_answer_prompt(body.question, body.pdfContent, body.fileName or "", limit=FUNCTION_ANSWER_LIMIT)
    try:
        answer = await orchestrator.llm.complete(prompt)
    except StageError as e:
        logger.error("Answer generation error: %s", e)
        return _error(str(e), 500)
    return AnswerFunctionResponse(answer=answer)


@router.post("/generate-quiz-questions", response_model=QuizFunctionResponse)
async def generate_quiz_questions(body: QuizFunctionRequest, orchestrator: Orchestrator = Depends(get_orchestrator)):
    if not body.pdfContent:
        return _error("Missing pdfContent", 400)
    if not orchestrator.llm.configured:
        return _error("Generative provider API key not configured", 500)

    count = clamp_count(body.questionCount)
    try:
        raw = await orchestrator.llm.complete(build_quiz_prompt(body.pdfContent, count), json_mode=True, max_tokens=4096)
        items, has_math = parse_quiz_payload(raw)
        questions = validate_questions(items, count)
    except StageError as e:
        logger.error("Question generation error: %s", e)
        return _error(str(e), 500)

    logger.info("generated %d questions, math content: %s", len(questions), has_math)
    return QuizFunctionResponse(questions=questions, hasMathContent=has_math)
