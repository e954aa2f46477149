import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from starlette.status import HTTP_201_CREATED

from pdfmind.core.config import Settings
from pdfmind.core.deps import get_orchestrator, get_session_store, get_settings_dep
from pdfmind.core.errors import FlowError, ValidationError
from pdfmind.models.chat import AskRequest, AskResponse, ChatHistory
from pdfmind.models.documents import PreviewResponse
from pdfmind.models.session import AppMode, PerformanceSummary, SelectModeRequest, SessionSnapshot
from pdfmind.services import flow
from pdfmind.services.orchestrator import Document, Orchestrator
from pdfmind.services.sessions import SessionStore
from pdfmind.services.uploads import validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/sessions", tags=["sessions"])


@router.post("", response_model=SessionSnapshot, status_code=HTTP_201_CREATED)
async def create_session(store: SessionStore = Depends(get_session_store)):
    return flow.snapshot(store.create())


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    return flow.snapshot(store.get(session_id))


@router.delete("/{session_id}", status_code=status.HTTP_200_OK)
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found.")
    return {"ok": True, "id": session_id}


@router.post("/{session_id}/document", response_model=SessionSnapshot)
async def upload_document(
    session_id: str,
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_session_store),
    orchestrator: Orchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings_dep),
):
    state = store.get(session_id)
    if state.mode != AppMode.upload:
        raise FlowError(f"Cannot upload from '{state.mode.value}'.")

    contents = await file.read()
    try:
        validate_upload(file.content_type, len(contents), settings.MAX_UPLOAD_MB * 1024 * 1024)
    except ValidationError as e:
        logger.info("upload rejected (%s): %s", file.filename, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    document = Document(name=file.filename or "document.pdf", content=contents)
    await flow.load_document(state, orchestrator, document)
    return flow.snapshot(state)


@router.get("/{session_id}/preview", response_model=PreviewResponse)
async def get_preview(session_id: str, store: SessionStore = Depends(get_session_store)):
    return flow.preview(store.get(session_id))


@router.post("/{session_id}/continue", response_model=SessionSnapshot)
async def continue_to_modes(session_id: str, store: SessionStore = Depends(get_session_store)):
    state = store.get(session_id)
    flow.continue_to_modes(state)
    return flow.snapshot(state)


@router.post("/{session_id}/back", response_model=SessionSnapshot)
async def go_back(session_id: str, store: SessionStore = Depends(get_session_store)):
    state = store.get(session_id)
    flow.go_back(state)
    return flow.snapshot(state)


@router.post("/{session_id}/mode", response_model=SessionSnapshot)
async def select_mode(
    session_id: str,
    body: SelectModeRequest,
    store: SessionStore = Depends(get_session_store),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    state = store.get(session_id)
    flow.select_mode(state, body.mode, body.count)
    if body.mode == AppMode.generate_quiz:
        await flow.generate_quiz(state, orchestrator)
    return flow.snapshot(state)


@router.get("/{session_id}/messages", response_model=ChatHistory)
async def get_messages(session_id: str, store: SessionStore = Depends(get_session_store)):
    return ChatHistory(messages=list(store.get(session_id).messages))


@router.post("/{session_id}/ask", response_model=AskResponse)
async def ask_question(
    session_id: str,
    body: AskRequest,
    store: SessionStore = Depends(get_session_store),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    if not body.question.strip():
        raise HTTPException(status_code=400, detail="Question must not be empty.")
    state = store.get(session_id)
    asked, answer = await flow.ask(state, orchestrator, body.question)
    return AskResponse(question=asked, answer=answer)


@router.get("/{session_id}/performance", response_model=PerformanceSummary)
async def get_performance(session_id: str, store: SessionStore = Depends(get_session_store)):
    return store.get(session_id).performance
