from typing import Any, Iterable, List, Tuple

from schemas import Decision, JobRequirements, MatchResult, coerce_skill_list

# Weights: mandatory coverage is worth 70 points, preferred coverage 30.
MANDATORY_WEIGHT = 70.0
PREFERRED_WEIGHT = 30.0
ACCEPT_THRESHOLD = 60.0


def _unique(skills: Any) -> List[str]:
    out, seen = [], set()
    for s in coerce_skill_list(skills):
        key = s.lower()
        if key not in seen:
            seen.add(key)
            out.append(s)
    return out


def skill_present(required: str, candidate_skills: Iterable[str]) -> bool:
    """Case-insensitive substring match in either direction."""
    r = required.lower()
    return any(r in c or c in r for c in (s.lower() for s in candidate_skills))


def split_matches(required: List[str], candidate_skills: List[str]) -> Tuple[List[str], List[str]]:
    hits, misses = [], []
    for skill in required:
        (hits if skill_present(skill, candidate_skills) else misses).append(skill)
    return hits, misses


def coverage_points(matched: int, total: int, weight: float) -> float:
    # An empty requirement list is fully satisfied.
    if total == 0:
        return weight
    return matched / total * weight


def score_match(candidate_skills: Any, mandatory_skills: Any, preferred_skills: Any) -> MatchResult:
    """
    Fixed-weight linear score of a candidate's skills against a job.

    Malformed skill lists (None, strings, numbers) count as empty, so this
    never raises on bad input.
    """
    candidate = _unique(candidate_skills)
    mandatory = _unique(mandatory_skills)
    preferred = _unique(preferred_skills)

    mandatory_hit, mandatory_miss = split_matches(mandatory, candidate)
    preferred_hit, _ = split_matches(preferred, candidate)

    score = round(
        coverage_points(len(mandatory_hit), len(mandatory), MANDATORY_WEIGHT)
        + coverage_points(len(preferred_hit), len(preferred), PREFERRED_WEIGHT),
        2,
    )
    has_all_mandatory = not mandatory_miss
    decision = Decision.ACCEPT if score >= ACCEPT_THRESHOLD and has_all_mandatory else Decision.REJECT

    return MatchResult(
        score=score,
        decision=decision,
        has_all_mandatory=has_all_mandatory,
        mandatory_matched=mandatory_hit,
        mandatory_missing=mandatory_miss,
        preferred_matched=preferred_hit,
    )


def score_requirements(candidate_skills: Any, requirements: JobRequirements) -> MatchResult:
    return score_match(candidate_skills, requirements.mandatory_skills, requirements.preferred_skills)
