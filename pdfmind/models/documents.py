from typing import List
from pydantic import BaseModel, Field


class DocumentInfo(BaseModel):
    name: str = Field(..., description="Nom du fichier avec extension")
    size: int = Field(..., ge=0, description="Taille en octets")
    characters: int = Field(..., ge=0, description="Longueur du texte extrait")


class PreviewResponse(BaseModel):
    fileName: str
    lines: List[str] = Field(..., description="10 premières lignes non vides")
    totalLines: int
    remainingLines: int
    words: int
    characters: int
