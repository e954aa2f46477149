from typing import Optional

from fastapi import APIRouter, Depends

from pdfmind.core.deps import get_orchestrator, get_session_store
from pdfmind.core.errors import FlowError
from pdfmind.models.quiz import AnswerRequest, GenerateQuizRequest, QuizResult, QuizState
from pdfmind.models.session import SessionSnapshot
from pdfmind.services import flow
from pdfmind.services.orchestrator import Orchestrator
from pdfmind.services.sessions import SessionStore

router = APIRouter(prefix="/v1/sessions/{session_id}/quiz", tags=["quiz"])


def _quiz_view(state: flow.AppState) -> QuizState:
    if state.quiz is None:
        raise FlowError("Not on the quiz screen.")
    return flow.quiz_state(state.quiz, state.quiz_duration)


@router.get("", response_model=QuizState)
async def get_quiz(session_id: str, store: SessionStore = Depends(get_session_store)):
    return _quiz_view(store.get(session_id))


@router.post("/answer", response_model=QuizState)
async def answer_question(session_id: str, body: AnswerRequest, store: SessionStore = Depends(get_session_store)):
    state = store.get(session_id)
    flow.select_answer(state, body.questionId, body.choiceIndex)
    return _quiz_view(state)


@router.post("/submit", response_model=QuizResult)
async def submit_quiz(session_id: str, store: SessionStore = Depends(get_session_store)):
    return flow.submit_quiz(store.get(session_id))


@router.post("/regenerate", response_model=QuizState)
async def regenerate_quiz(
    session_id: str,
    body: Optional[GenerateQuizRequest] = None,
    store: SessionStore = Depends(get_session_store),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    state = store.get(session_id)
    await flow.generate_quiz(state, orchestrator, body.count if body else None)
    return _quiz_view(state)


@router.post("/test-again", response_model=SessionSnapshot)
async def test_again(session_id: str, store: SessionStore = Depends(get_session_store)):
    state = store.get(session_id)
    flow.test_again(state)
    return flow.snapshot(state)
