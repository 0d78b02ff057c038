import re
import logging
from typing import Iterable, List, Optional
from urllib.parse import urlparse

import phonenumbers

from config import PHONE_DEFAULT_REGION
from parsers.skills import find_dictionary_skills, related_dictionary_term
from schemas import UNKNOWN_CANDIDATE, ExtractedCandidate, StructuredCandidate

logger = logging.getLogger(__name__)


EMAIL_RE = re.compile(r'\b[A-Za-z0-9._%+-]+@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b')
PLACEHOLDER_EMAIL_DOMAINS = {
    'example.com', 'example.org', 'example.net', 'test.com', 'domain.com', 'email.com',
}

# Ordered: the first pattern with an acceptable match wins.
PHONE_PATTERNS = [
    re.compile(r'\+\d{1,3}[ .-]?\(?\d{1,4}\)?(?:[ .-]?\d{2,5}){1,4}'),   # +CC prefixed
    re.compile(r'\(\d{2,4}\)[ .-]?\d{3,4}[ .-]?\d{3,4}'),                 # (area) 555-1234
    re.compile(r'(?<!\d)\d{3}[ .-]\d{3}[ .-]\d{4}(?!\d)'),                # 555-123-4567
    re.compile(r'(?<!\d)\d{8,15}(?!\d)'),                                 # bare digit run
]
MIN_PHONE_DIGITS = 7

URL_RE = re.compile(r'https?://[^\s<>"\'()\[\]{}]+', re.IGNORECASE)
BARE_URL_RE = re.compile(
    r'(?<![\w/@.])(?:www\.|linkedin\.com/|github\.com/)[^\s<>"\'()\[\]{}]+', re.IGNORECASE
)
PROFESSIONAL_DOMAINS = (
    'linkedin.com', 'github.com', 'gitlab.com', 'bitbucket.org', 'medium.com',
    'behance.net', 'dribbble.com', 'stackoverflow.com', 'kaggle.com', 'dev.to',
    'github.io', 'vercel.app', 'netlify.app', 'about.me', 'substack.com',
)

NAME_SCAN_LINES = 15
NAME_MIN_LETTER_RATIO = 0.6
BOILERPLATE_RE = re.compile(
    r'\b(?:curriculum|vitae|resume|résumé|cv|profile|summary|objective|contact|'
    r'skills|experience|education|projects|certifications?|references|languages|'
    r'interests|hobbies|employment|address|phone|email|mobile|page)\b',
    re.IGNORECASE,
)
# Any Unicode letter counts; digits and underscores do not.
NAME_TOKEN_RE = re.compile(r"^[^\W\d_](?:[^\W\d_]|['.\-])*$")
NAME_SPECIAL_CHAR_RE = re.compile(r"[^\w\s.'\-]|[\d_]")

SKILLS_HEADER_RE = re.compile(
    r'^[ \t]*(?:technical[ \t]+skills|key[ \t]+skills|core[ \t]+skills|'
    r'skills(?:[ \t]+(?:&|and)[ \t]+(?:tools|technologies|expertise))?|technologies|'
    r'tech(?:nology)?[ \t]+stack|core[ \t]+competencies|competencies|'
    r'(?:areas[ \t]+of[ \t]+)?expertise)[ \t]*[:\-–|]?[ \t]*(?P<rest>.*)$',
    re.IGNORECASE | re.MULTILINE,
)
OTHER_SECTION_RE = re.compile(
    r'^\s*(?:professional\s+|work\s+)?(?:experience|history|employment|education|projects|'
    r'certifications?|languages|interests|hobbies|references|summary|objective|profile|'
    r'awards|publications|contact|volunteering)\s*:?\s*$',
    re.IGNORECASE,
)
SKILL_TOKEN_SPLIT_RE = re.compile(r'[,;|•·●▪◦\t\n]|\s[-–]\s')
SKILLS_SECTION_MAX_LINES = 25
BAD_SKILL_CHARS_RE = re.compile(r'[|\\/\[\]{}@#$%^&*<>]')


def clean_text(text: str) -> str:
    """Normalize line endings and odd whitespace; keep line structure."""
    text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\x00", " ").replace("\u00a0", " ")
    return "\n".join(line.rstrip() for line in text.split("\n"))


def _digit_count(s: str) -> int:
    return sum(1 for ch in s if ch.isdigit())


def _dedupe(items: Iterable[str]) -> List[str]:
    out, seen = [], set()
    for item in items:
        key = item.lower().rstrip('/')
        if key and key not in seen:
            seen.add(key)
            out.append(item)
    return out


def _host(url: str) -> str:
    host = urlparse(url).netloc.lower()
    return host[4:] if host.startswith("www.") else host


def is_professional_link(url: str) -> bool:
    host = _host(url)
    return any(host == d or host.endswith("." + d) for d in PROFESSIONAL_DOMAINS)


def normalize_phone(raw: str, region: Optional[str] = None) -> str:
    """E.164 form of ``raw`` when it is a possible number, else ""."""
    if not raw:
        return ""
    try:
        number = phonenumbers.parse(raw, region or PHONE_DEFAULT_REGION)
    except phonenumbers.NumberParseException:
        return ""
    if not phonenumbers.is_possible_number(number):
        return ""
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.E164)


def clean_skills(skills: Iterable[str]) -> List[str]:
    """Drop junk entries (too short, pure punctuation, odd symbols); lower-case and dedupe."""
    out = set()
    for skill in skills or []:
        if not isinstance(skill, str):
            continue
        s = skill.strip().lower()
        if len(s) < 2 or not re.search(r'[a-z0-9]', s) or BAD_SKILL_CHARS_RE.search(s):
            continue
        out.add(s)
    return sorted(out)


class CandidateExtractor:
    """Regex and line-position heuristics over plain CV text."""

    def __init__(self, phone_region: Optional[str] = None):
        self.phone_region = phone_region or PHONE_DEFAULT_REGION

    def extract_email(self, text: str) -> str:
        """First address whose domain is not a placeholder."""
        for match in EMAIL_RE.finditer(text):
            domain = match.group(1).lower()
            if any(domain == d or domain.endswith("." + d) for d in PLACEHOLDER_EMAIL_DOMAINS):
                continue
            return match.group(0)
        return ""

    def extract_phone(self, text: str) -> str:
        for pattern in PHONE_PATTERNS:
            for match in pattern.finditer(text):
                candidate = match.group(0).strip(" .-")
                if _digit_count(candidate) >= MIN_PHONE_DIGITS:
                    return candidate
        return ""

    def extract_links(self, text: str) -> List[str]:
        """
        All URLs in order of appearance, deduplicated. When any of them is on a
        professional domain (LinkedIn, GitHub, portfolio hosts) only those are kept.
        """
        found = []
        for match in URL_RE.finditer(text):
            found.append((match.start(), match.group(0)))
        for match in BARE_URL_RE.finditer(text):
            found.append((match.start(), "https://" + match.group(0)))
        found.sort(key=lambda x: x[0])

        links = _dedupe(url.rstrip('.,;:!?\'"') for _, url in found)
        professional = [url for url in links if is_professional_link(url)]
        return professional or links

    def _looks_like_contact(self, line: str) -> bool:
        if EMAIL_RE.search(line) or URL_RE.search(line) or BARE_URL_RE.search(line):
            return True
        return any(
            _digit_count(m.group(0)) >= MIN_PHONE_DIGITS
            for pattern in PHONE_PATTERNS
            for m in pattern.finditer(line)
        )

    def _score_name_line(self, line: str, index: int) -> int:
        tokens = line.split()
        score = 0
        if 2 <= len(tokens) <= 4 and all(NAME_TOKEN_RE.match(t) and t[0].isupper() for t in tokens):
            score += 20
        score += NAME_SCAN_LINES - index
        score -= 10 * len(NAME_SPECIAL_CHAR_RE.findall(line))
        if not 5 <= len(line) <= 60:
            score -= 15
        return score

    def extract_name(self, text: str) -> str:
        """
        Best-scoring line among the first few non-empty lines.

        Contact lines and CV boilerplate are skipped. A line earns points for
        looking like 2-4 capitalized words and for being near the top, and
        loses points for special characters or an odd length.
        """
        lines = [line.strip() for line in text.split("\n") if line.strip()][:NAME_SCAN_LINES]

        best, best_score = None, 0
        for index, line in enumerate(lines):
            if self._looks_like_contact(line) or BOILERPLATE_RE.search(line):
                continue
            score = self._score_name_line(line, index)
            if score > best_score:
                best, best_score = line, score

        if not best:
            return UNKNOWN_CANDIDATE
        letters = sum(1 for ch in best if ch.isalpha())
        if letters / len(best) < NAME_MIN_LETTER_RATIO:
            logger.info(f"Rejected name candidate {best!r}: too few letters")
            return UNKNOWN_CANDIDATE
        return best

    def _skills_section_tokens(self, text: str) -> List[str]:
        match = SKILLS_HEADER_RE.search(text)
        if not match:
            return []

        body = [match.group('rest')]
        following = text[match.end():].split("\n")[1:]
        for line in following[:SKILLS_SECTION_MAX_LINES]:
            if not line.strip() or OTHER_SECTION_RE.match(line):
                break
            body.append(line)

        tokens = []
        for raw in SKILL_TOKEN_SPLIT_RE.split("\n".join(body)):
            token = raw.strip(" -*.:()").lower()
            if 2 <= len(token) <= 40:
                tokens.append(token)
        return tokens

    def extract_skills(self, text: str) -> List[str]:
        """
        Dictionary hits over the whole text, plus tokens from an explicit
        skills section that relate to a dictionary entry. Errs towards
        reporting too many skills rather than too few.
        """
        found = set(find_dictionary_skills(text))
        for token in self._skills_section_tokens(text):
            if related_dictionary_term(token):
                found.add(token)
        return sorted(found)

    def extract(self, text: str) -> ExtractedCandidate:
        text = clean_text(text if isinstance(text, str) else "")
        phone = self.extract_phone(text)
        candidate = ExtractedCandidate(
            name=self.extract_name(text),
            email=self.extract_email(text),
            phone=phone,
            phone_e164=normalize_phone(phone, self.phone_region),
            links=self.extract_links(text),
            skills=self.extract_skills(text),
        )
        logger.info(
            f"Extracted candidate {candidate.name!r}: "
            f"{len(candidate.skills)} skills, {len(candidate.links)} links"
        )
        return candidate

    def from_structured(self, result: StructuredCandidate) -> ExtractedCandidate:
        """Normalize a model-produced record into the same shape as ``extract``."""
        email = self.extract_email(result.email)
        phone = result.phone.strip()
        links = _dedupe(link.strip() for link in result.links if link and link.strip())
        return ExtractedCandidate(
            name=result.name.strip() or UNKNOWN_CANDIDATE,
            email=email,
            phone=phone,
            phone_e164=normalize_phone(phone, self.phone_region),
            links=links,
            skills=clean_skills(result.skills),
        )


_default_extractor = CandidateExtractor()


def extract_candidate(text: str) -> ExtractedCandidate:
    return _default_extractor.extract(text)


def extract_skills(text: str) -> List[str]:
    return _default_extractor.extract_skills(clean_text(text if isinstance(text, str) else ""))
