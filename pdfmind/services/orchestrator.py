import base64
import logging
from dataclasses import dataclass
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from pdfmind.core.config import Settings
from pdfmind.core.errors import ParseError
from pdfmind.models.quiz import QuizBatch
from pdfmind.services.answers import build_answer_prompt, canned_answer, local_answer
from pdfmind.services.fallback import Stage, run_chain
from pdfmind.services.functions_client import FunctionsClient
from pdfmind.services.llm import LLMClient
from pdfmind.services.pdfco import PdfCoClient
from pdfmind.services.question_bank import local_quiz
from pdfmind.services.quiz_gen import build_quiz_prompt, clamp_count, parse_quiz_payload, validate_questions
from pdfmind.utils.pdf_extract import extract_text_from_bytes

logger = logging.getLogger(__name__)


@dataclass
class Document:
    name: str
    content: bytes
    text: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class _AnswerRequest:
    text: str
    question: str
    file_name: str


@dataclass
class _QuizRequest:
    text: str
    count: int


def empty_text_placeholder(file_name: str) -> str:
    return f"Unable to extract text from {file_name}. Please ensure the PDF contains selectable text."


class Orchestrator:
    """
    Choisit, pour chaque opération, le chemin d'appel :
    - extract_text    : PDF.co direct -> fonction hébergée -> pypdf local
    - answer_question : heuristiques locales -> fonction hébergée -> LLM direct -> réponse figée
    - generate_quiz   : fonction hébergée -> LLM direct -> banque locale
    """

    def __init__(
        self,
        pdfco: PdfCoClient,
        llm: LLMClient,
        functions: FunctionsClient,
        local_heuristics: bool = True,
    ):
        self.pdfco = pdfco
        self.llm = llm
        self.functions = functions
        self.local_heuristics = local_heuristics

    @classmethod
    def from_settings(cls, settings: Settings) -> "Orchestrator":
        timeout = settings.HTTP_TIMEOUT_SECONDS
        return cls(
            pdfco=PdfCoClient(settings.PDFCO_API_KEY, settings.PDFCO_BASE_URL, timeout=timeout),
            llm=LLMClient(
                settings.OPENAI_API_KEY,
                model=settings.OPENAI_MODEL,
                base_url=settings.OPENAI_BASE_URL,
                timeout=timeout,
            ),
            functions=FunctionsClient(settings.FUNCTIONS_URL, settings.FUNCTIONS_API_KEY, timeout=timeout),
            local_heuristics=settings.LOCAL_HEURISTICS,
        )

    # ---------- public API ----------

    async def extract_text(self, document: Document) -> str:
        stages = [
            Stage("pdfco", self._extract_direct),
            Stage("function", self._extract_via_function),
            Stage("local", self._extract_locally),
        ]
        _, text = await run_chain("extraction", stages, document)
        if not text or not text.strip():
            logger.info("no text extracted from %s", document.name)
            return empty_text_placeholder(document.name)
        return text

    async def answer_question(self, text: str, question: str, file_name: str = "") -> str:
        question = (question or "").strip()
        if not question:
            raise ValueError("question must not be empty")

        stages: List[Stage] = []
        if self.local_heuristics:
            stages.append(Stage("heuristics", self._answer_locally))
        stages += [
            Stage("function", self._answer_via_function),
            Stage("llm", self._answer_direct),
            Stage("canned", self._answer_canned),
        ]
        _, answer = await run_chain("answering", stages, _AnswerRequest(text or "", question, file_name))
        return answer

    async def generate_quiz(self, text: str, count: int) -> QuizBatch:
        stages = [
            Stage("function", self._quiz_via_function),
            Stage("llm", self._quiz_direct),
            Stage("bank", self._quiz_from_bank),
        ]
        source, batch = await run_chain("quiz generation", stages, _QuizRequest(text or "", clamp_count(count)))
        batch.source = source
        return batch

    # ---------- extraction stages ----------

    async def _extract_direct(self, doc: Document) -> str:
        return await self.pdfco.extract_text(doc.content, doc.name)

    async def _extract_via_function(self, doc: Document) -> str:
        data = await self.functions.invoke(
            "extract-pdf-text",
            {"fileData": base64.b64encode(doc.content).decode("ascii"), "fileName": doc.name},
        )
        text = data.get("text")
        if not isinstance(text, str):
            raise ParseError("extract-pdf-text returned no text field")
        return text

    async def _extract_locally(self, doc: Document) -> str:
        try:
            return await run_in_threadpool(extract_text_from_bytes, doc.content)
        except Exception as e:
            raise ParseError(f"local PDF extraction failed: {e}") from e

    # ---------- answer stages ----------

    async def _answer_locally(self, req: _AnswerRequest) -> str:
        return local_answer(req.question, req.text, req.file_name)

    async def _answer_via_function(self, req: _AnswerRequest) -> str:
        data = await self.functions.invoke(
            "answer-pdf-question",
            {"question": req.question, "pdfContent": req.text, "fileName": req.file_name},
        )
        answer = data.get("answer")
        if not isinstance(answer, str) or not answer.strip():
            raise ParseError("answer-pdf-question returned no answer")
        return answer

    async def _answer_direct(self, req: _AnswerRequest) -> str:
        return await self.llm.complete(build_answer_prompt(req.question, req.text, req.file_name))

    async def _answer_canned(self, req: _AnswerRequest) -> str:
        return canned_answer(req.question, req.text)

    # ---------- quiz stages ----------

    async def _quiz_via_function(self, req: _QuizRequest) -> QuizBatch:
        data = await self.functions.invoke(
            "generate-quiz-questions",
            {"pdfContent": req.text, "questionCount": req.count},
        )
        items = data.get("questions")
        if not isinstance(items, list):
            raise ParseError("generate-quiz-questions returned no question list")
        return QuizBatch(
            questions=validate_questions(items, req.count),
            hasMathContent=bool(data.get("hasMathContent", False)),
            source="function",
        )

    async def _quiz_direct(self, req: _QuizRequest) -> QuizBatch:
        raw = await self.llm.complete(build_quiz_prompt(req.text, req.count), json_mode=True, max_tokens=4096)
        items, has_math = parse_quiz_payload(raw)
        return QuizBatch(
            questions=validate_questions(items, req.count),
            hasMathContent=has_math,
            source="llm",
        )

    async def _quiz_from_bank(self, req: _QuizRequest) -> QuizBatch:
        return QuizBatch(questions=local_quiz(req.count), hasMathContent=False, source="bank")
