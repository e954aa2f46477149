import io
from pypdf import PdfReader


def extract_text_from_bytes(data: bytes, max_pages: int = 0) -> str:
    """
    Extrait le texte d'un PDF en mémoire (fallback local, sans service distant).
    - max_pages : 0 = toutes les pages
    Lève l'exception pypdf si le fichier est illisible.
    """
    reader = PdfReader(io.BytesIO(data))

    chunks = []
    for i, page in enumerate(reader.pages):
        if max_pages and i >= max_pages:
            break
        txt = page.extract_text() or ""
        if txt.strip():
            chunks.append(txt)
    return "\n".join(chunks)
