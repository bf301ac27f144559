"""Read uploaded chatbot training files into plain text."""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from aione.models.chatbot import PdfContent

logger = logging.getLogger(__name__)

PDF_TEXT_LIMIT = 2000


def read_csv_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def pdf_placeholder(name: str, size: int) -> str:
    return f"Content from {name} ({round(size / 1024)} KB)"


def read_pdf(name: str, data: bytes) -> PdfContent:
    """Return the first ``PDF_TEXT_LIMIT`` characters of text in the PDF *data*.

    PDFs that cannot be parsed, or that carry no text layer, are summarised by
    a one-line placeholder naming the file and its size.
    """
    size = len(data)
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = []
        total = 0
        for page in reader.pages:
            text = (page.extract_text() or "").strip()
            if text:
                pages.append(text)
                total += len(text)
            if total >= PDF_TEXT_LIMIT:
                break
        content = "\n".join(pages)[:PDF_TEXT_LIMIT]
    except (PdfReadError, ValueError, KeyError) as exc:
        logger.warning("Could not read PDF %s: %s", name, exc)
        content = ""

    if not content:
        content = pdf_placeholder(name, size)
    logger.info("Processed PDF file: %s (%d KB)", name, round(size / 1024))
    return PdfContent(name=name, size=size, content=content)
