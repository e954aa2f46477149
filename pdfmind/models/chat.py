from datetime import datetime
from enum import Enum
from typing import List
from pydantic import BaseModel, Field


class Author(str, Enum):
    user = "user"
    assistant = "assistant"


class ChatMessage(BaseModel):
    id: str
    author: Author
    text: str
    timestamp: datetime

    model_config = {"frozen": True}


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=4000)


class AskResponse(BaseModel):
    question: ChatMessage
    answer: ChatMessage


class ChatHistory(BaseModel):
    messages: List[ChatMessage]
