import re
from typing import Dict, List, Optional

from parsers.skills import find_dictionary_skills
from schemas import JobRequirements

# Checked before the mandatory headers so "Preferred Qualifications" lands here.
PREFERRED_HEADER_RE = re.compile(
    r"^\s*(?:preferred|nice[-\s]?to[-\s]?haves?|good[-\s]to[-\s]have|bonus(?:\s+points)?|desirable|"
    r"pluses|optional)\b",
    re.IGNORECASE,
)
MANDATORY_HEADER_RE = re.compile(
    r"^\s*(?:requirements|required(?:\s+skills)?|must[-\s]haves?|qualifications|mandatory(?:\s+skills)?|"
    r"skills\s+required|what\s+you[’']?ll\s+need|minimum\s+qualifications)\b",
    re.IGNORECASE,
)
OTHER_HEADER_RE = re.compile(
    r"^\s*(?:responsibilities|what\s+you[’']?ll\s+do|key\s+tasks|duties|your\s+role|about\s+(?:us|the\s+role)|"
    r"what\s+we\s+offer|benefits|perks|how\s+to\s+apply)\b[^:\n]*:?\s*$",
    re.IGNORECASE,
)


def split_sections(text: str) -> Dict[str, str]:
    """
    Group job-description lines under "mandatory", "preferred" or "other"
    according to the most recent section header.
    """
    sections: Dict[str, List[str]] = {"mandatory": [], "preferred": [], "other": []}
    current: Optional[str] = None

    for line in (text or "").splitlines():
        m = PREFERRED_HEADER_RE.match(line)
        if m:
            current = "preferred"
            sections[current].append(line)
            continue
        m = MANDATORY_HEADER_RE.match(line)
        if m:
            current = "mandatory"
            sections[current].append(line)
            continue
        if OTHER_HEADER_RE.match(line):
            current = "other"
            continue
        sections[current or "other"].append(line)

    return {name: "\n".join(lines) for name, lines in sections.items()}


def extract_job_requirements(text: str) -> JobRequirements:
    """
    Mandatory and preferred skill lists from a pasted job description.

    Dictionary skills under a requirements-style header are mandatory, those
    under a nice-to-have header are preferred. A description without either
    header has every skill it mentions treated as mandatory.
    """
    sections = split_sections(text)

    if not sections["mandatory"].strip() and not sections["preferred"].strip():
        return JobRequirements(mandatory_skills=find_dictionary_skills(text))

    mandatory = find_dictionary_skills(sections["mandatory"])
    preferred = [s for s in find_dictionary_skills(sections["preferred"]) if s not in mandatory]
    return JobRequirements(mandatory_skills=mandatory, preferred_skills=preferred)
