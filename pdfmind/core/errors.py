from typing import List, Optional


class PdfMindError(Exception):
    """Base de toutes les erreurs applicatives."""


class ValidationError(PdfMindError):
    """
    Upload refusé avant toute requête (type ou taille).
    Géré entièrement par le router, n'atteint jamais l'orchestrateur.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FlowError(PdfMindError):
    """Transition d'écran interdite ou état incompatible."""


# ---------- étapes de fallback ----------

class StageError(PdfMindError):
    """Échec d'une étape : déclenche l'étape suivante."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.stage}] {base}" if self.stage else base


class ProviderError(StageError):
    """Appel distant en échec (réseau, statut non 2xx, payload sans succès)."""


class ParseError(StageError):
    """Réponse impossible à interpréter (JSON invalide, aucun item valide)."""


class StageSkipped(StageError):
    """Étape non applicable à cette requête (ex: heuristique locale sans réponse)."""


USER_MESSAGES = {
    "extraction": "Failed to process the PDF file. Please try again.",
    "answering": "I'm having trouble answering right now. Please try again.",
    "quiz generation": "Failed to generate questions. Please try again.",
}


class ExhaustedFallbackError(PdfMindError):
    """Toutes les étapes d'une opération ont échoué."""

    def __init__(self, operation: str, errors: List[StageError]):
        self.operation = operation
        self.errors = errors
        super().__init__(f"{operation} failed after {len(errors)} stage(s)")

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(
            self.operation, f"The {self.operation} failed. Please try again."
        )

    def describe(self) -> List[str]:
        return [str(e) for e in self.errors]
