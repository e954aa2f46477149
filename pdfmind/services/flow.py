"""
Contrôleur du parcours écran par écran.

    upload -> preview -> select-mode -> {ask-question | generate-quiz}

Toutes les mutations de l'état applicatif passent par les fonctions de ce
module. Chaque transition incrémente `epoch` : une requête en attente retient
l'epoch de départ et son résultat est ignoré si l'écran a changé entre-temps.
"""
import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from pdfmind.core.errors import FlowError
from pdfmind.models.chat import Author, ChatMessage
from pdfmind.models.documents import DocumentInfo, PreviewResponse
from pdfmind.models.quiz import PublicQuestion, QuizBatch, QuizQuestion, QuizResult, QuizState, ResultItem
from pdfmind.models.session import AppMode, PerformanceSummary, SessionSnapshot
from pdfmind.services.answers import welcome_message
from pdfmind.services.orchestrator import Document, Orchestrator
from pdfmind.services.timer import QuizTimer
from pdfmind.utils.text_utils import non_empty_lines

logger = logging.getLogger(__name__)

PREVIEW_LINES = 10

_BACK = {
    AppMode.preview: AppMode.upload,
    AppMode.select_mode: AppMode.preview,
    AppMode.ask_question: AppMode.select_mode,
    AppMode.generate_quiz: AppMode.select_mode,
}


@dataclass
class QuizSession:
    requested_count: int
    questions: List[QuizQuestion] = field(default_factory=list)
    has_math_content: bool = False
    source: Optional[str] = None
    answers: Dict[str, int] = field(default_factory=dict)
    show_results: bool = False
    result: Optional[QuizResult] = None
    is_generating: bool = False
    timer: Optional[QuizTimer] = None


@dataclass
class AppState:
    id: str
    quiz_duration: int = 1800
    mode: AppMode = AppMode.upload
    document: Optional[Document] = None
    messages: List[ChatMessage] = field(default_factory=list)
    asking: bool = False
    extracting: bool = False
    quiz: Optional[QuizSession] = None
    performance: PerformanceSummary = field(default_factory=PerformanceSummary)
    epoch: int = 0
    created_at: float = field(default_factory=time.time)

    @property
    def text(self) -> Optional[str]:
        return self.document.text if self.document else None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _message(author: Author, text: str) -> ChatMessage:
    return ChatMessage(
        id=uuid.uuid4().hex[:12],
        author=author,
        text=text,
        timestamp=datetime.now(timezone.utc),
    )


# ---------- transitions ----------

def _enter(state: AppState, mode: AppMode) -> None:
    if state.mode == AppMode.generate_quiz and state.quiz and state.quiz.timer:
        state.quiz.timer.stop()
    logger.debug("session %s: %s -> %s", state.id, state.mode.value, mode.value)
    state.mode = mode
    state.epoch += 1


def _require_text(state: AppState) -> str:
    if state.text is None:
        raise FlowError("No extracted text available, upload a PDF first.")
    return state.text


def upload_document(state: AppState, document: Document) -> None:
    """Active un nouveau document (texte déjà extrait) et passe à l'aperçu."""
    if document.text is None:
        raise FlowError("Document text has not been extracted.")
    if state.quiz and state.quiz.timer:
        state.quiz.timer.stop()
    state.document = document
    state.messages = []
    state.quiz = None
    _enter(state, AppMode.preview)


async def load_document(state: AppState, orchestrator: Orchestrator, document: Document) -> None:
    """
    Extrait le texte puis active le document. Un seul upload en cours par
    session : un second est refusé avant tout appel distant.
    """
    if state.mode != AppMode.upload:
        raise FlowError(f"Cannot upload from '{state.mode.value}'.")
    if state.extracting:
        raise FlowError("A PDF is already being processed.")

    epoch = state.epoch
    state.extracting = True
    try:
        document.text = await orchestrator.extract_text(document)
    finally:
        state.extracting = False

    if state.epoch != epoch:
        logger.info("session %s: discarding stale extraction", state.id)
        raise FlowError("The screen changed while the PDF was being processed.")
    upload_document(state, document)


def continue_to_modes(state: AppState) -> None:
    if state.mode != AppMode.preview:
        raise FlowError(f"Cannot continue from '{state.mode.value}'.")
    _require_text(state)
    _enter(state, AppMode.select_mode)


def select_mode(state: AppState, mode: AppMode, count: int) -> None:
    if state.mode != AppMode.select_mode:
        raise FlowError(f"Cannot select a mode from '{state.mode.value}'.")
    if mode not in (AppMode.ask_question, AppMode.generate_quiz):
        raise FlowError(f"'{mode.value}' is not a learning mode.")
    _require_text(state)

    if mode == AppMode.ask_question:
        state.messages = [_message(Author.assistant, welcome_message(state.document.name))]
    else:
        state.quiz = QuizSession(requested_count=count)
    _enter(state, mode)


def go_back(state: AppState) -> None:
    target = _BACK.get(state.mode)
    if target is None:
        raise FlowError("Already on the upload screen.")
    _enter(state, target)


def test_again(state: AppState) -> None:
    """Retour au choix du mode ; la tentative en cours est abandonnée."""
    if state.mode != AppMode.generate_quiz:
        raise FlowError("Not on the quiz screen.")
    _enter(state, AppMode.select_mode)
    state.quiz = None


# ---------- question / réponse ----------

async def ask(state: AppState, orchestrator: Orchestrator, question: str) -> Tuple[ChatMessage, ChatMessage]:
    if state.mode != AppMode.ask_question:
        raise FlowError("Not on the question screen.")
    question = (question or "").strip()
    if not question:
        raise FlowError("Question must not be empty.")
    if state.asking:
        raise FlowError("A question is already being answered.")

    text = _require_text(state)
    epoch = state.epoch
    asked = _message(Author.user, question)
    state.messages.append(asked)
    state.asking = True
    try:
        answer = await orchestrator.answer_question(text, question, state.document.name)
    finally:
        state.asking = False

    if state.epoch != epoch:
        logger.info("session %s: discarding stale answer", state.id)
        raise FlowError("The screen changed while the answer was pending.")

    reply = _message(Author.assistant, answer)
    state.messages.append(reply)
    return asked, reply


# ---------- quiz ----------

def _current_quiz(state: AppState) -> QuizSession:
    if state.mode != AppMode.generate_quiz or state.quiz is None:
        raise FlowError("Not on the quiz screen.")
    return state.quiz


async def generate_quiz(state: AppState, orchestrator: Orchestrator, count: Optional[int] = None) -> QuizSession:
    """
    Lance une génération. Refusée si une génération est déjà en cours.
    Remet à zéro la tentative (réponses, résultats, timer).
    """
    quiz = _current_quiz(state)
    if quiz.is_generating:
        raise FlowError("Quiz generation already in progress.")
    text = _require_text(state)

    if count is not None:
        quiz.requested_count = count
    if quiz.timer:
        quiz.timer.stop()
    quiz.questions = []
    quiz.answers = {}
    quiz.show_results = False
    quiz.result = None
    quiz.is_generating = True
    epoch = state.epoch

    try:
        batch = await orchestrator.generate_quiz(text, quiz.requested_count)
    finally:
        quiz.is_generating = False

    if state.epoch != epoch or state.quiz is not quiz:
        logger.info("session %s: discarding stale quiz", state.id)
        raise FlowError("The screen changed while the quiz was being generated.")

    _apply_batch(state, quiz, batch)
    return quiz


def _apply_batch(state: AppState, quiz: QuizSession, batch: QuizBatch) -> None:
    quiz.questions = list(batch.questions)
    quiz.has_math_content = batch.hasMathContent
    quiz.source = batch.source
    logger.info(
        "session %s: %d question(s) ready (source=%s)", state.id, len(quiz.questions), batch.source
    )

    def _expire() -> None:
        if state.quiz is quiz and not quiz.show_results:
            submit_quiz(state, auto=True)

    quiz.timer = QuizTimer(state.quiz_duration, _expire)
    quiz.timer.start()


def select_answer(state: AppState, question_id: str, choice: int) -> None:
    quiz = _current_quiz(state)
    check_timer(state)
    if quiz.is_generating:
        raise FlowError("Questions are still being generated.")
    if quiz.show_results:
        raise FlowError("Quiz already submitted.")
    question = next((q for q in quiz.questions if q.id == question_id), None)
    if question is None:
        raise FlowError(f"Unknown question '{question_id}'.")
    if not 0 <= choice < len(question.options):
        raise FlowError("Invalid choice index.")
    quiz.answers[question_id] = choice


def score_quiz(questions: List[QuizQuestion], answers: Dict[str, int]) -> QuizResult:
    details = []
    for q in questions:
        chosen = answers.get(q.id)
        details.append(
            ResultItem(
                questionId=q.id,
                question=q.question,
                difficulty=q.difficulty,
                chosenIndex=chosen,
                correctIndex=q.correctAnswer,
                isCorrect=chosen == q.correctAnswer,
                explanation=q.explanation,
            )
        )
    score = sum(1 for d in details if d.isCorrect)
    total = len(questions)
    percentage = round_half_up(100 * score / total) if total else 0
    return QuizResult(score=score, total=total, percentage=percentage, details=details)


def record_performance(perf: PerformanceSummary, percentage: int) -> PerformanceSummary:
    n = perf.totalTests
    return PerformanceSummary(
        totalTests=n + 1,
        averageScore=round_half_up((perf.averageScore * n + percentage) / (n + 1)),
        bestScore=max(perf.bestScore, percentage),
    )


def submit_quiz(state: AppState, auto: bool = False) -> QuizResult:
    """
    Corrige la tentative et met à jour les performances.
    Idempotent : une fois les résultats affichés, renvoie le résultat existant.
    Une soumission manuelle exige une réponse à chaque question.
    """
    quiz = state.quiz
    if quiz is None or (not auto and state.mode != AppMode.generate_quiz):
        raise FlowError("Not on the quiz screen.")
    if quiz.show_results and quiz.result is not None:
        return quiz.result
    if quiz.is_generating or not quiz.questions:
        raise FlowError("No questions to submit.")
    if not auto and len(quiz.answers) != len(quiz.questions):
        raise FlowError("Answer every question before submitting.")

    if quiz.timer:
        quiz.timer.stop()
    result = score_quiz(quiz.questions, quiz.answers)
    quiz.result = result
    quiz.show_results = True
    state.performance = record_performance(state.performance, result.percentage)
    logger.info(
        "session %s: quiz submitted%s, %d/%d (%d%%)",
        state.id, " by timer" if auto else "", result.score, result.total, result.percentage,
    )
    return result


def check_timer(state: AppState) -> None:
    """Détection paresseuse de l'expiration (si la boucle n'a pas pu la faire)."""
    if state.quiz and state.quiz.timer:
        state.quiz.timer.tick()


# ---------- vues ----------

def preview(state: AppState) -> PreviewResponse:
    if state.document is None:
        raise FlowError("No document uploaded.")
    text = _require_text(state)
    lines = non_empty_lines(text)
    return PreviewResponse(
        fileName=state.document.name,
        lines=lines[:PREVIEW_LINES],
        totalLines=len(lines),
        remainingLines=max(0, len(lines) - PREVIEW_LINES),
        words=len(text.split(" ")),
        characters=len(text),
    )


def quiz_state(quiz: QuizSession, duration: int) -> QuizState:
    return QuizState(
        requestedCount=quiz.requested_count,
        isGenerating=quiz.is_generating,
        hasMathContent=quiz.has_math_content,
        source=quiz.source,
        questions=[
            PublicQuestion(id=q.id, question=q.question, options=q.options, difficulty=q.difficulty)
            for q in quiz.questions
        ],
        answers=dict(quiz.answers),
        timeLeft=quiz.timer.time_left if quiz.timer else duration,
        showResults=quiz.show_results,
        result=quiz.result,
    )


def snapshot(state: AppState) -> SessionSnapshot:
    document = None
    if state.document is not None:
        document = DocumentInfo(
            name=state.document.name,
            size=state.document.size,
            characters=len(state.text or ""),
        )
    return SessionSnapshot(
        sessionId=state.id,
        mode=state.mode,
        document=document,
        performance=state.performance,
        messages=list(state.messages),
        quiz=quiz_state(state.quiz, state.quiz_duration) if state.quiz else None,
    )
