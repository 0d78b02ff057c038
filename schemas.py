from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_CANDIDATE = "Unknown Candidate"


def coerce_skill_list(value: Any) -> List[str]:
    """
    Turn whatever a caller stored as a skill list into a clean list of strings.
    None, bare strings and other non-list values become []; non-string and
    blank members are dropped.
    """
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    out = []
    for item in value:
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
    return out


# Parsed candidate fields
class ExtractedCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = UNKNOWN_CANDIDATE
    email: str = ""
    phone: str = ""
    phone_e164: str = ""
    links: List[str] = []
    skills: List[str] = []


# What the inference model returns through the extract_cv_data tool
class StructuredCandidate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    email: str
    phone: str
    links: List[str]
    skills: List[str]


class JobRequirements(BaseModel):
    mandatory_skills: List[str] = []
    preferred_skills: List[str] = []

    @field_validator("mandatory_skills", "preferred_skills", mode="before")
    @classmethod
    def _coerce(cls, value):
        return coerce_skill_list(value)


class Decision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


# Match score result
class MatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0, le=100)
    decision: Decision
    has_all_mandatory: bool
    mandatory_matched: List[str] = []
    mandatory_missing: List[str] = []
    preferred_matched: List[str] = []


class ScreeningResult(BaseModel):
    filename: Optional[str] = None
    candidate: ExtractedCandidate
    match: MatchResult
    extraction_method: str


class CategoryResult(BaseModel):
    category: str
    confidence: float = Field(ge=0, le=100)
    reasoning: str = ""


# --- request payloads ---

class MatchRequest(BaseModel):
    candidate_skills: List[str] = []
    mandatory_skills: List[str] = []
    preferred_skills: List[str] = []

    @field_validator("candidate_skills", "mandatory_skills", "preferred_skills", mode="before")
    @classmethod
    def _coerce(cls, value):
        return coerce_skill_list(value)


class JobDescriptionIn(BaseModel):
    jd_text: str


class CategorizeRequest(BaseModel):
    cv_text: str


# One entry of a batch screening run: either a result or an error message
class BatchItem(BaseModel):
    filename: str
    result: Optional[ScreeningResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None
