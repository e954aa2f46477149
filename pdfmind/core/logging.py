import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Configure le logging racine une seule fois (appelé par create_app).
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("pdfmind").setLevel(level.upper())
    # httpx logue chaque requête en INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
