"""
Text extraction strategies for uploaded CVs.

``DocumentTextExtractor`` reads the document's own text (PDF text layer,
DOCX paragraphs, plain text). ``VisionTextExtractor`` hands the raw bytes to
an external multimodal model. ``ExtractorChain`` tries strategies in a fixed
order, once each, and reports which one produced the text.
"""
import io
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import docx

from parsers.pdf import ExtractionFailed, ensure_readable, pdf_to_text

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"

_PRINTABLE_RUN = re.compile(rb"[\x20-\x7E\t\r\n]{4,}")


def detect_kind(data: bytes, filename: str = "", mime_type: str = "") -> str:
    """Best-effort document kind from signature, extension and declared MIME type."""
    ext = Path(filename or "").suffix.lower()
    mime = (mime_type or "").split(";")[0].strip().lower()

    if data.startswith(b"%PDF") or ext == ".pdf" or mime == PDF_MIME:
        return "pdf"
    if ext == ".docx" or mime == DOCX_MIME:
        return "docx"
    if data.startswith(b"\xD0\xCF\x11\xE0") or ext == ".doc" or mime == DOC_MIME:
        return "doc"
    if ext == ".txt" or mime.startswith("text/"):
        return "txt"
    if data.startswith(b"PK\x03\x04"):
        return "docx"
    return "unknown"


def mime_for(kind: str, declared: str = "") -> str:
    if declared:
        return declared
    return {"pdf": PDF_MIME, "docx": DOCX_MIME, "doc": DOC_MIME, "txt": "text/plain"}.get(
        kind, "application/octet-stream"
    )


def read_docx(data: bytes) -> str:
    """Extract text from DOCX paragraphs and tables."""
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        raise ExtractionFailed(f"Could not open DOCX document: {e}") from e

    lines = [para.text for para in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" ".join(cell.text for cell in row.cells))
    return "\n".join(lines)


def read_txt(data: bytes) -> str:
    """Decode plain text trying the usual encodings in order."""
    for encoding in ("utf-8", "latin-1", "cp1252"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ExtractionFailed("Unable to decode text file with supported encodings")


def read_legacy_doc(data: bytes) -> str:
    # Word 97 binaries keep most body text as plain runs; no layout recovery.
    runs = _PRINTABLE_RUN.findall(data)
    return "\n".join(run.decode("ascii", errors="ignore").strip() for run in runs)


class TextExtractor(ABC):
    """A strategy turning document bytes into plain text."""

    name = "abstract"

    @abstractmethod
    def extract(self, data: bytes, filename: str = "", mime_type: str = "") -> str:
        """Return readable text or raise ExtractionFailed."""
        raise NotImplementedError


class DocumentTextExtractor(TextExtractor):
    """Reads the text a document already carries; no OCR."""

    name = "text-layer"

    def extract(self, data: bytes, filename: str = "", mime_type: str = "") -> str:
        if not data:
            raise ExtractionFailed("Empty document")

        kind = detect_kind(data, filename, mime_type)
        logger.debug(f"[DEBUG] Detected document kind: {kind} ({filename or 'unnamed'})")

        if kind == "pdf":
            text = pdf_to_text(data)
        elif kind == "docx":
            text = read_docx(data)
        elif kind == "doc":
            text = read_legacy_doc(data)
        elif kind == "txt":
            text = read_txt(data)
        else:
            raise ExtractionFailed(f"Unsupported file format: {filename or mime_type or 'unknown'}")

        return ensure_readable(text, filename or kind)


class VisionTextExtractor(TextExtractor):
    """
    Delegates transcription to an external multimodal model.

    ``transcriber`` is anything exposing ``transcribe(data, mime_type) -> str``;
    in production that is ``matching.llm_client.InferenceClient``.
    """

    name = "vision-model"

    def __init__(self, transcriber):
        self.transcriber = transcriber

    def extract(self, data: bytes, filename: str = "", mime_type: str = "") -> str:
        if not data:
            raise ExtractionFailed("Empty document")
        kind = detect_kind(data, filename, mime_type)
        text = self.transcriber.transcribe(data, mime_for(kind, mime_type))
        return ensure_readable(text, f"{filename or kind} (vision model)")


class ExtractorChain(TextExtractor):
    """
    Ordered fallback chain. Each strategy runs at most once; the first one
    returning readable text wins, otherwise the last failure propagates.
    """

    name = "chain"

    def __init__(self, extractors: Sequence[TextExtractor]):
        if not extractors:
            raise ValueError("ExtractorChain needs at least one extractor")
        self.extractors: List[TextExtractor] = list(extractors)

    def extract_with_method(
        self, data: bytes, filename: str = "", mime_type: str = ""
    ) -> Tuple[str, str]:
        last_error: Optional[ExtractionFailed] = None
        for extractor in self.extractors:
            try:
                text = extractor.extract(data, filename, mime_type)
            except ExtractionFailed as e:
                logger.warning(f"[WARN] {extractor.name} extraction failed for {filename or 'document'}: {e}")
                last_error = e
                continue
            logger.info(f"[INFO] {extractor.name} extracted {len(text)} characters from {filename or 'document'}")
            return text, extractor.name
        raise last_error

    def extract(self, data: bytes, filename: str = "", mime_type: str = "") -> str:
        text, _ = self.extract_with_method(data, filename, mime_type)
        return text


def default_chain(transcriber=None) -> ExtractorChain:
    """Text layer first; the vision model only when a transcriber is configured."""
    extractors: List[TextExtractor] = [DocumentTextExtractor()]
    if transcriber is not None:
        extractors.append(VisionTextExtractor(transcriber))
    return ExtractorChain(extractors)
