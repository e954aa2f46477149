from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from pdfmind.models.chat import ChatMessage
from pdfmind.models.documents import DocumentInfo
from pdfmind.models.quiz import DEFAULT_QUESTIONS, MAX_QUESTIONS, MIN_QUESTIONS, QuizState


class AppMode(str, Enum):
    upload = "upload"
    preview = "preview"
    select_mode = "select-mode"
    ask_question = "ask-question"
    generate_quiz = "generate-quiz"


class PerformanceSummary(BaseModel):
    totalTests: int = 0
    averageScore: int = 0
    bestScore: int = 0


class SelectModeRequest(BaseModel):
    mode: AppMode
    count: int = Field(default=DEFAULT_QUESTIONS, ge=MIN_QUESTIONS, le=MAX_QUESTIONS)


class SessionSnapshot(BaseModel):
    sessionId: str
    mode: AppMode
    document: Optional[DocumentInfo] = None
    performance: PerformanceSummary
    messages: List[ChatMessage] = Field(default_factory=list)
    quiz: Optional[QuizState] = None
