from typing import List, Optional
from pydantic import BaseModel

from pdfmind.models.quiz import QuizQuestion

# Corps des fonctions hébergées : champs optionnels, le 400 est géré à la main
# pour renvoyer {error, success:false}.


class ExtractFunctionRequest(BaseModel):
    fileData: Optional[str] = None  # base64
    fileName: Optional[str] = None


class AnswerFunctionRequest(BaseModel):
    question: Optional[str] = None
    pdfContent: Optional[str] = None
    fileName: Optional[str] = None


class QuizFunctionRequest(BaseModel):
    pdfContent: Optional[str] = None
    questionCount: Optional[int] = None


class ExtractFunctionResponse(BaseModel):
    text: str
    success: bool = True


class AnswerFunctionResponse(BaseModel):
    answer: str
    success: bool = True


class QuizFunctionResponse(BaseModel):
    questions: List[QuizQuestion]
    hasMathContent: bool = False
    success: bool = True
