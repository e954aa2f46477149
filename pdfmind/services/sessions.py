import time
import uuid
import logging
from typing import Callable, Dict

from fastapi import HTTPException
from starlette.status import HTTP_404_NOT_FOUND

from pdfmind.services.flow import AppState, check_timer

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Sessions applicatives en mémoire (une par onglet navigateur).
    Une session expire après `ttl_seconds` sans accès.
    """

    def __init__(
        self,
        ttl_seconds: int = 60 * 60,
        quiz_duration: int = 1800,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sessions: Dict[str, AppState] = {}
        self._last_seen: Dict[str, float] = {}
        self._ttl_seconds = ttl_seconds
        self._quiz_duration = quiz_duration
        self._clock = clock

    def create(self) -> AppState:
        self._purge()
        state = AppState(id=f"sess_{uuid.uuid4().hex[:12]}", quiz_duration=self._quiz_duration)
        self._sessions[state.id] = state
        self._last_seen[state.id] = self._clock()
        logger.info("session %s created", state.id)
        return state

    def get(self, session_id: str) -> AppState:
        state = self._sessions.get(session_id)
        if not state:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Session not found.")
        if self._clock() - self._last_seen[session_id] > self._ttl_seconds:
            self.delete(session_id)
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Session expired.")
        self._last_seen[session_id] = self._clock()
        check_timer(state)
        return state

    def delete(self, session_id: str) -> bool:
        state = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if state is None:
            return False
        if state.quiz and state.quiz.timer:
            state.quiz.timer.stop()
        return True

    def _purge(self) -> None:
        now = self._clock()
        for sid in [s for s, seen in self._last_seen.items() if now - seen > self._ttl_seconds]:
            self.delete(sid)

    def __len__(self) -> int:
        return len(self._sessions)
