from __future__ import annotations
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

import config
from matching.llm_client import ExternalServiceError, InferenceClient, default_client
from matching.scorer import score_match
from parsers.document import default_chain
from parsers.jd_extract import extract_job_requirements
from parsers.pdf import ExtractionFailed
from pipeline import MODEL_MODE, parse_document, screen_batch, screen_document
from schemas import (
    BatchItem,
    CategorizeRequest,
    CategoryResult,
    ExtractedCandidate,
    JobDescriptionIn,
    JobRequirements,
    MatchRequest,
    MatchResult,
    ScreeningResult,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="CV Screener")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_inference_client() -> Optional[InferenceClient]:
    return default_client()


def _split_skills(value: Optional[str]) -> List[str]:
    """Comma separated form field -> list of skills."""
    return [s.strip() for s in (value or "").split(",") if s.strip()]


def _require_client(client: Optional[InferenceClient]) -> InferenceClient:
    if client is None:
        raise HTTPException(status_code=503, detail="Inference is not configured (set INFERENCE_API_KEY).")
    return client


async def _read_upload(resume: UploadFile) -> bytes:
    data = await resume.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    return data


def _http_error(e: ExtractionFailed) -> HTTPException:
    # ExternalServiceError subclasses ExtractionFailed, so it is checked first
    if isinstance(e, ExternalServiceError):
        logger.error(f"[ERROR] Inference failure ({e.status_code}): {e}")
        return HTTPException(status_code=502, detail=str(e))
    logger.warning(f"[WARN] Extraction failed: {e}")
    return HTTPException(status_code=422, detail=f"Could not read this document: {e}")


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok", "inference_enabled": config.inference_enabled()}


@app.post("/candidates/parse", response_model=ExtractedCandidate)
async def parse_candidate(
    resume: UploadFile = File(...),
    mode: str = Query("heuristic", pattern="^(heuristic|model)$"),
    client: Optional[InferenceClient] = Depends(get_inference_client),
):
    """Extract name, contact details, links and skills from an uploaded CV."""
    data = await _read_upload(resume)
    if mode == MODEL_MODE:
        _require_client(client)

    try:
        candidate, method = await run_in_threadpool(
            parse_document,
            data,
            resume.filename or "",
            resume.content_type or "",
            chain=default_chain(client),
            mode=mode,
            client=client,
        )
    except ExtractionFailed as e:
        raise _http_error(e)

    logger.info(f"[INFO] Parsed {resume.filename} via {method}")
    return candidate


@app.post("/candidates/screen", response_model=ScreeningResult)
async def screen_candidate(
    resume: UploadFile = File(...),
    mandatory_skills: str = Form(""),
    preferred_skills: str = Form(""),
    client: Optional[InferenceClient] = Depends(get_inference_client),
):
    """Parse an uploaded CV and score it against the given skill lists."""
    data = await _read_upload(resume)
    requirements = JobRequirements(
        mandatory_skills=_split_skills(mandatory_skills),
        preferred_skills=_split_skills(preferred_skills),
    )
    try:
        return await run_in_threadpool(
            screen_document,
            data,
            resume.filename or "",
            requirements,
            mime_type=resume.content_type or "",
            chain=default_chain(client),
        )
    except ExtractionFailed as e:
        raise _http_error(e)


@app.post("/candidates/screen-batch", response_model=List[BatchItem])
async def screen_candidates(
    resumes: List[UploadFile] = File(...),
    mandatory_skills: str = Form(""),
    preferred_skills: str = Form(""),
    client: Optional[InferenceClient] = Depends(get_inference_client),
):
    """Screen several CVs at once; unreadable files are reported per item."""
    documents = [(r.filename or f"document-{i}", await r.read()) for i, r in enumerate(resumes, 1)]
    requirements = JobRequirements(
        mandatory_skills=_split_skills(mandatory_skills),
        preferred_skills=_split_skills(preferred_skills),
    )
    return await run_in_threadpool(screen_batch, documents, requirements, chain=default_chain(client))


@app.post("/candidates/categorize", response_model=CategoryResult)
def categorize_candidate(
    req: CategorizeRequest,
    client: Optional[InferenceClient] = Depends(get_inference_client),
):
    if not req.cv_text or not req.cv_text.strip():
        raise HTTPException(status_code=400, detail="cv_text cannot be empty.")
    client = _require_client(client)
    try:
        return client.categorize(req.cv_text)
    except ExternalServiceError as e:
        raise _http_error(e)


@app.post("/match", response_model=MatchResult)
def match(req: MatchRequest):
    """Score candidate skills against mandatory and preferred skills."""
    return score_match(req.candidate_skills, req.mandatory_skills, req.preferred_skills)


@app.post("/jobs/requirements", response_model=JobRequirements)
def job_requirements(job: JobDescriptionIn):
    """Pull mandatory and preferred skills out of a job description."""
    if not job.jd_text or not job.jd_text.strip():
        raise HTTPException(status_code=400, detail="jd_text cannot be empty.")
    return extract_job_requirements(job.jd_text)
