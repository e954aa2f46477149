from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

MIN_QUESTIONS = 1
MAX_QUESTIONS = 50
DEFAULT_QUESTIONS = 5


class Difficulty(str, Enum):
    easy = "easy"
    intermediate = "intermediate"
    advanced = "advanced"
    logical = "logical"
    mathematical = "mathematical"


class QuizQuestion(BaseModel):
    id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1, description="Énoncé de la question")
    options: List[str] = Field(..., min_length=4, max_length=4)
    correctAnswer: int = Field(..., ge=0, le=3)
    difficulty: Difficulty
    explanation: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class PublicQuestion(BaseModel):
    """Question sans la bonne réponse (renvoyée tant que le quiz est en cours)."""
    id: str
    question: str
    options: List[str]
    difficulty: Difficulty


class QuizBatch(BaseModel):
    questions: List[QuizQuestion]
    hasMathContent: bool = False
    source: str = Field(..., description="Étape de fallback ayant produit le lot")


class GenerateQuizRequest(BaseModel):
    count: int = Field(default=DEFAULT_QUESTIONS, ge=MIN_QUESTIONS, le=MAX_QUESTIONS)


class AnswerRequest(BaseModel):
    questionId: str
    choiceIndex: int = Field(..., ge=0, le=3)


class ResultItem(BaseModel):
    questionId: str
    question: str
    difficulty: Difficulty
    chosenIndex: Optional[int] = None
    correctIndex: int
    isCorrect: bool
    explanation: str


class QuizResult(BaseModel):
    score: int
    total: int
    percentage: int
    details: List[ResultItem]


class QuizState(BaseModel):
    requestedCount: int
    isGenerating: bool
    hasMathContent: bool
    source: Optional[str] = None
    questions: List[PublicQuestion]
    answers: Dict[str, int]
    timeLeft: int
    showResults: bool
    result: Optional[QuizResult] = None
