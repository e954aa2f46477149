import re
from typing import List

GENERIC_HEADINGS = {"abstract", "introduction", "table of contents", "contents"}

_GREETING_RE = re.compile(r"^(hi|hello|hey|yo|sup|good\s+(morning|afternoon|evening))\b")
_FENCE_RE = re.compile(r"```(?:json)?\n?")


def normalize_text(text: str) -> str:
    """
    Nettoie une chaîne : trim et espaces réduits.
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def non_empty_lines(text: str) -> List[str]:
    return [line.rstrip("\r") for line in (text or "").split("\n") if line.strip()]


def infer_title(text: str, file_name: str) -> str:
    """
    Devine le titre principal d'un document.

    Parcourt les 50 premières lignes non vides et retient la première ligne
    raisonnablement courte (6 à 120 caractères) qui n'est pas un intitulé
    générique ("Introduction", "Contents"...). À défaut, dérive un titre du
    nom de fichier, puis "Document".
    """
    for line in non_empty_lines(text)[:50]:
        s = normalize_text(line)
        if 6 <= len(s) <= 120 and s.lower() not in GENERIC_HEADINGS:
            return s

    stem = re.sub(r"\.[^.]+$", "", file_name or "")
    from_name = re.sub(r"[-_]+", " ", stem).strip()
    return from_name or "Document"


def is_greeting(text: str) -> bool:
    return bool(_GREETING_RE.match((text or "").lower().strip()))


def asks_for_title(text: str) -> bool:
    q = (text or "").lower()
    return "title" in q or "topic" in q or "name of the pdf" in q


def strip_code_fences(text: str) -> str:
    """Retire le balisage ```json ... ``` que les LLM ajoutent autour du JSON."""
    return _FENCE_RE.sub("", text or "").strip()
