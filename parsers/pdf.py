import io
import logging

import fitz  # PyMuPDF
from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)

# Fewer non-whitespace characters than this is not a readable CV.
MIN_TEXT_CHARS = 50
# Share of alphanumeric characters among non-whitespace ones.
MIN_ALNUM_RATIO = 0.30


class ExtractionFailed(RuntimeError):
    """No readable text could be recovered from a document."""


def readability(text: str) -> float:
    """Alphanumeric share of the non-whitespace characters in ``text`` (0..1)."""
    visible = [ch for ch in text or "" if not ch.isspace()]
    if not visible:
        return 0.0
    return sum(1 for ch in visible if ch.isalnum()) / len(visible)


def is_readable(text: str) -> bool:
    visible = sum(1 for ch in text or "" if not ch.isspace())
    return visible >= MIN_TEXT_CHARS and readability(text) >= MIN_ALNUM_RATIO


def ensure_readable(text: str, source: str = "document") -> str:
    """Return ``text`` stripped, or raise ExtractionFailed if it is not plausible CV text."""
    text = (text or "").strip()
    if not is_readable(text):
        raise ExtractionFailed(
            f"Could not extract meaningful text from {source} "
            f"({len(text)} chars, {readability(text):.0%} alphanumeric)"
        )
    return text


def _text_via_pymupdf(data: bytes) -> str:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return "\n".join(page.get_text("text") or "" for page in doc)


def _text_via_pypdf2(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def pdf_to_text(data: bytes) -> str:
    """
    Extract the text layer of in-memory PDF bytes.

    PyMuPDF walks the text-showing operators page by page; PyPDF2 is only
    used when PyMuPDF cannot open the buffer. Returns "" when neither library
    can read the document; readability is judged by the caller.
    """
    try:
        text = _text_via_pymupdf(data)
        logger.info(f"[INFO] Extracted {len(text)} characters via PyMuPDF")
        return text.strip()
    except Exception as e:
        logger.warning(f"[WARN] PyMuPDF extraction failed: {e}")

    try:
        text = _text_via_pypdf2(data)
        logger.info(f"[INFO] Extracted {len(text)} characters via PyPDF2 fallback")
        return text.strip()
    except Exception as e:
        logger.error(f"[ERROR] PyPDF2 extraction failed: {e}")

    return ""
