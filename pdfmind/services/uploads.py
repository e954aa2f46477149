from typing import Optional

from starlette.status import HTTP_413_REQUEST_ENTITY_TOO_LARGE, HTTP_415_UNSUPPORTED_MEDIA_TYPE

from pdfmind.core.errors import ValidationError

PDF_MIME = "application/pdf"


def validate_upload(content_type: Optional[str], size: int, max_bytes: int) -> None:
    """
    Contrôle l'upload avant toute requête distante : PDF uniquement, taille max.
    Un PDF vide (0 octet) est accepté.
    """
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime != PDF_MIME:
        raise ValidationError(
            "Invalid file type. Please upload a PDF file only.",
            status_code=HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )
    if size > max_bytes:
        raise ValidationError(
            f"File too large. Please upload a PDF file smaller than {max_bytes // (1024 * 1024)}MB.",
            status_code=HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
