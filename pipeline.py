"""
End-to-end screening: document bytes -> candidate fields -> match result.

``parse_document`` and ``screen_document`` handle one upload;
``screen_batch`` runs several in a thread pool and never lets one bad CV
stop the others.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

import config
from matching.llm_client import ExternalServiceError, default_client
from matching.scorer import score_requirements
from parsers.document import ExtractorChain, default_chain, detect_kind, mime_for
from parsers.extract import CandidateExtractor
from parsers.pdf import ExtractionFailed
from schemas import BatchItem, ExtractedCandidate, JobRequirements, ScreeningResult

logger = logging.getLogger(__name__)

HEURISTIC_MODE = "heuristic"
MODEL_MODE = "model"
STRUCTURED_METHOD = "structured-model"
CANCELLED = "cancelled"


def _structured_candidate(data: bytes, filename: str, mime_type: str, client, extractor: CandidateExtractor):
    if not data:
        raise ExtractionFailed("Empty document")
    client = client or default_client()
    if client is None:
        raise ExternalServiceError("Inference is not configured")
    kind = detect_kind(data, filename, mime_type)
    result = client.extract_structured(data, mime_for(kind, mime_type))
    return extractor.from_structured(result)


def parse_document(
    data: bytes,
    filename: str = "",
    mime_type: str = "",
    chain: Optional[ExtractorChain] = None,
    extractor: Optional[CandidateExtractor] = None,
    mode: str = HEURISTIC_MODE,
    client=None,
) -> Tuple[ExtractedCandidate, str]:
    """
    Candidate fields from an uploaded document plus the name of the method
    that produced them ("text-layer", "vision-model" or "structured-model").

    Raises ExtractionFailed when no strategy yields readable text.
    """
    extractor = extractor or CandidateExtractor()

    if mode == MODEL_MODE:
        candidate = _structured_candidate(data, filename, mime_type, client, extractor)
        logger.info(f"[INFO] Structured model parsed {filename or 'document'}")
        return candidate, STRUCTURED_METHOD
    if mode != HEURISTIC_MODE:
        raise ValueError(f"Unknown parse mode: {mode}")

    chain = chain or default_chain(client or default_client())
    text, method = chain.extract_with_method(data, filename, mime_type)
    logger.debug(f"[DEBUG] Text preview for {filename or 'document'}: {text[:80]!r}")
    return extractor.extract(text), method


def screen_document(
    data: bytes,
    filename: str,
    requirements: JobRequirements,
    mime_type: str = "",
    chain: Optional[ExtractorChain] = None,
    extractor: Optional[CandidateExtractor] = None,
    mode: str = HEURISTIC_MODE,
    client=None,
) -> ScreeningResult:
    candidate, method = parse_document(data, filename, mime_type, chain, extractor, mode, client)
    match = score_requirements(candidate.skills, requirements)
    logger.info(
        f"[INFO] Screened {filename or 'document'}: {candidate.name!r} "
        f"score={match.score} decision={match.decision.value}"
    )
    return ScreeningResult(filename=filename, candidate=candidate, match=match, extraction_method=method)


def screen_batch(
    documents: Sequence[Tuple[str, bytes]],
    requirements: JobRequirements,
    max_workers: Optional[int] = None,
    chain: Optional[ExtractorChain] = None,
    mode: str = HEURISTIC_MODE,
    client=None,
    cancel_event: Optional[threading.Event] = None,
) -> List[BatchItem]:
    """
    Screen ``(filename, data)`` pairs concurrently.

    Returns one BatchItem per document in input order. Failures are recorded
    on the item; once ``cancel_event`` is set, documents not yet started are
    reported as cancelled.
    """
    workers = max(1, max_workers or config.BATCH_MAX_WORKERS)
    # One chain and extractor shared by every worker
    if mode == HEURISTIC_MODE:
        chain = chain or default_chain(client or default_client())
    extractor = CandidateExtractor()

    def _run(filename: str, data: bytes) -> BatchItem:
        if cancel_event is not None and cancel_event.is_set():
            return BatchItem(filename=filename, error=CANCELLED)
        try:
            result = screen_document(data, filename, requirements, chain=chain, extractor=extractor,
                                     mode=mode, client=client)
        except Exception as e:
            logger.warning(f"[WARN] Could not screen {filename}: {e}")
            return BatchItem(filename=filename, error=str(e))
        return BatchItem(filename=filename, result=result)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_run, filename, data) for filename, data in documents]
        items = [f.result() for f in futures]

    failed = sum(1 for item in items if not item.ok)
    logger.info(f"[INFO] Batch screened {len(items)} documents, {failed} without result")
    return items
