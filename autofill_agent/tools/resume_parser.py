"""Heuristic parser turning plain resume text into a Profile."""

import logging
import re
from typing import List, Optional, Tuple

from autofill_agent.core.models import Education, Experience, Profile

logger = logging.getLogger(__name__)

MAX_EXPERIENCES = 5

SECTION_KEYWORDS = [
    'experience', 'education', 'skills', 'summary', 'objective', 'profile',
    'work history', 'employment', 'projects', 'certifications', 'awards',
    'publications', 'languages', 'interests', 'references', 'volunteer',
]
SUMMARY_KEYWORDS = [
    'summary', 'objective', 'profile', 'about', 'overview', 'professional summary',
    'career objective', 'career summary', 'qualifications',
]
EXPERIENCE_KEYWORDS = [
    'experience', 'work experience', 'employment', 'work history',
    'professional experience', 'career history',
]
EDUCATION_KEYWORDS = ['education', 'academic', 'qualifications', 'degrees', 'university', 'college']
SKILLS_KEYWORDS = [
    'skills', 'technical skills', 'core competencies', 'expertise',
    'technologies', 'tools', 'proficiencies',
]

MONTHS = {
    'jan': '01', 'feb': '02', 'mar': '03', 'apr': '04', 'may': '05', 'jun': '06',
    'jul': '07', 'aug': '08', 'sep': '09', 'oct': '10', 'nov': '11', 'dec': '12',
}
_MONTH = r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
MONTH_RANGE_RE = re.compile(
    rf"({_MONTH})\.?\s+(\d{{4}})\s*[-–—]+\s*(?:({_MONTH})\.?\s+)?(\d{{4}}|Present|Current)", re.I)
YEAR_RANGE_RE = re.compile(r"(\d{4})\s*[-–—]+\s*(\d{4}|Present|Current)", re.I)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERNS = [
    re.compile(r"(?:\+?1[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}"),
    re.compile(r"\+\d{1,3}[\s.-]?\(?\d{2,4}\)?[\s.-]?\d{3,4}[\s.-]?\d{3,4}"),
]
LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/(?:in/)?[\w-]+", re.I)
GITHUB_RE = re.compile(r"(?:https?://)?(?:www\.)?github\.com/[\w-]+", re.I)
GITHUB_HANDLE_RE = re.compile(r"github:\s*([\w-]+)", re.I)
URL_RE = re.compile(
    r"(?<![@\w.-])(?:https?://[^\s,|]+|www\.[^\s,|]+|[\w-]+\.(?:com|io|dev|me|net|org|app|co|xyz)(?:/[^\s,|]*)?)\b/?",
    re.I)
EXCLUDED_HOSTS = ('linkedin.com', 'github.com', 'facebook.com', 'twitter.com')
LOCATION_PATTERNS = [
    re.compile(r"\b([A-Z][a-z]+(?: [A-Z][a-z]+)*), ?([A-Z]{2})\b"),
    re.compile(r"\b([A-Z][a-z]+(?: [A-Z][a-z]+)*), ?([A-Z][a-z]+)\b"),
]
NAME_RE = re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]*\.?)?\s+[A-Z][a-z'-]+)\b")

TITLE_SEPARATOR_RE = re.compile(r"\s*\|\s*|,\s*|\s+at\s+|\s+[-–—]+\s+")
BULLET_RE = re.compile(r"^[•\-*▪◦]\s*")
DEGREE_LEVELS = [
    ("Bachelor", re.compile(r"\b(bachelor'?s?|b\.s\.?|b\.a\.?|b\.sc\.?|bsc|bs|ba)(?![a-z])", re.I)),
    ("Master", re.compile(r"\b(master'?s?|m\.s\.?|m\.a\.?|m\.sc\.?|msc|ms|ma|mba|m\.b\.a\.?)(?![a-z])", re.I)),
    ("PhD", re.compile(r"\b(ph\.?\s?d\.?|doctorate|doctoral)", re.I)),
    ("Associate", re.compile(r"\b(associate'?s?|a\.s\.|a\.a\.)(?![a-z])", re.I)),
]
INSTITUTION_RE = re.compile(
    r"((?:[A-Z][\w.&']*\s+)*(?:University|College|Institute|School)(?:\s+of\s+[A-Z][\w ]*[A-Za-z])?)")
MAJOR_PATTERNS = [
    re.compile(r"\bin\s+([A-Z][^,\n]+?)(?=\s+from\b|\s+at\b|,|$)"),
    re.compile(r"major:?\s*([A-Z][^,\n]+?)(?=,|$)", re.I),
]
GPA_RE = re.compile(r"gpa:?\s*(\d+(?:\.\d+)?)", re.I)


def month_number(name: Optional[str]) -> str:
    return MONTHS.get((name or '')[:3].lower(), '01')


def extract_date_range(text: str) -> Optional[Tuple[str, str]]:
    """Find a date range and return (start, end) as YYYY-MM; an open range ends in ''."""
    match = MONTH_RANGE_RE.search(text)
    if match:
        start_month, start_year, end_month, end_year = match.groups()
        start = f"{start_year}-{month_number(start_month)}"
        if end_year.lower() in ('present', 'current'):
            return start, ''
        return start, f"{end_year}-{month_number(end_month or 'Dec')}"

    match = YEAR_RANGE_RE.search(text)
    if match:
        start_year, end_year = match.groups()
        if end_year.lower() in ('present', 'current'):
            return f"{start_year}-01", ''
        return f"{start_year}-01", f"{end_year}-12"
    return None


def is_section_header(line: str) -> bool:
    cleaned = re.sub(r"[:\s]", "", line.lower())
    if not cleaned or len(line) > 40:
        return False
    return any(cleaned == k.replace(' ', '') or cleaned.startswith(k.replace(' ', '')) for k in SECTION_KEYWORDS)


def looks_like_header(line: str) -> bool:
    return len(line) < 50 and line[:1].isupper() and '.' not in line and len(line.split()) <= 5


def _is_heading_for(line: str, keywords: List[str]) -> bool:
    lower = line.lower().strip()
    return any(lower == k or lower == k + ':' or lower.startswith(k + ':') for k in keywords)


class ResumeParser:
    """Extracts contact details, experience, education and skills from resume text."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def parse(self, text: str) -> Profile:
        """
        Parse normalized resume text.

        Args:
            text: Plain text of the resume, one visual line per line

        Returns:
            Profile populated with whatever could be recognised
        """
        lines = self.normalize_lines(text)
        profile = Profile()
        joined = "\n".join(lines)

        self._extract_contact(joined, profile)
        self._extract_name(lines, profile)
        profile.professional_summary = self._extract_summary(lines)
        profile.experiences = self._extract_experience(lines)
        profile.education = self._extract_education(lines)
        profile.skills_list = self._extract_skills(lines)
        profile.skills = ", ".join(profile.skills_list)

        self.logger.info(
            f"Parsed resume: {len(profile.experiences)} experiences, "
            f"{len(profile.education)} education entries, {len(profile.skills_list)} skills"
        )
        return profile

    @staticmethod
    def normalize_lines(text: str) -> List[str]:
        """Collapse whitespace within each line, keeping line structure."""
        text = (text or "").replace('\r\n', '\n').replace('\r', '\n')
        lines = [re.sub(r"[ \t ]+", " ", line).strip() for line in text.split('\n')]
        return [line for line in lines if line]

    def _extract_contact(self, text: str, profile: Profile):
        match = EMAIL_RE.search(text)
        if match:
            profile.email = match.group(0)

        for pattern in PHONE_PATTERNS:
            match = pattern.search(text)
            if match:
                profile.phone = re.sub(r"[^\d+]", "", match.group(0))
                break

        match = LINKEDIN_RE.search(text)
        if match:
            profile.linkedin = match.group(0)

        match = GITHUB_RE.search(text)
        if match:
            profile.github = match.group(0)
        else:
            match = GITHUB_HANDLE_RE.search(text)
            if match:
                profile.github = f"github.com/{match.group(1)}"

        for match in URL_RE.finditer(text):
            url = match.group(0)
            if not any(host in url.lower() for host in EXCLUDED_HOSTS):
                profile.portfolio = url
                break

        for pattern in LOCATION_PATTERNS:
            match = pattern.search(text)
            if match:
                profile.city, profile.state = match.group(1), match.group(2)
                break

    def _extract_name(self, lines: List[str], profile: Profile):
        for line in lines[:10]:
            match = NAME_RE.match(line)
            if not match:
                continue
            parts = match.group(1).split()
            profile.first_name = parts[0]
            profile.last_name = parts[-1]
            if len(parts) == 3 and len(parts[1].rstrip('.')) > 1:
                profile.middle_name = parts[1]
            profile.full_name = " ".join(parts)
            return

    def _section(self, lines: List[str], keywords: List[str]) -> List[str]:
        """Lines following a heading for keywords, up to the next unrelated section header."""
        for index, line in enumerate(lines):
            if _is_heading_for(line, keywords):
                body = []
                for follower in lines[index + 1:]:
                    lower = follower.lower()
                    if is_section_header(follower) and not any(k in lower for k in keywords):
                        break
                    body.append(follower)
                return body
        return []

    def _extract_summary(self, lines: List[str]) -> str:
        body = [line for line in self._section(lines, SUMMARY_KEYWORDS)[:9] if len(line) > 20]
        return " ".join(body)

    def _extract_experience(self, lines: List[str]) -> List[Experience]:
        experiences: List[Experience] = []
        current: Optional[Experience] = None

        for line in self._section(lines, EXPERIENCE_KEYWORDS):
            if BULLET_RE.match(line):
                if current is not None:
                    current.responsibilities.append(BULLET_RE.sub('', line))
                continue

            dates = extract_date_range(line)
            rest = MONTH_RANGE_RE.sub('', line)
            rest = YEAR_RANGE_RE.sub('', rest).strip(" ,|-–—()")
            parts = [p.strip() for p in TITLE_SEPARATOR_RE.split(rest) if p.strip()]

            if len(parts) >= 2 and len(rest) > 10:
                current = Experience(title=parts[0], company=parts[1])
                if dates:
                    current.start_date, current.end_date = dates
                    current.current = not dates[1]
                experiences.append(current)
            elif current is not None and dates and not current.start_date:
                current.start_date, current.end_date = dates
                current.current = not dates[1]
            elif current is not None and len(line) > 30 and not looks_like_header(line):
                current.responsibilities.append(line)

        return experiences[:MAX_EXPERIENCES]

    def _extract_education(self, lines: List[str]) -> List[Education]:
        entries: List[Education] = []
        current: Optional[Education] = None

        for line in self._section(lines, EDUCATION_KEYWORDS):
            level = next((name for name, pattern in DEGREE_LEVELS if pattern.search(line)), None)
            if level or (current is None and len(line) > 10):
                current = Education(degree=level or '')
                entries.append(current)

                match = INSTITUTION_RE.search(line)
                if match:
                    current.institution = match.group(1).strip()
                for pattern in MAJOR_PATTERNS:
                    match = pattern.search(line)
                    if match:
                        current.major = match.group(1).strip()
                        break
                dates = extract_date_range(line)
                if dates:
                    current.start_date, current.end_date = dates
                match = GPA_RE.search(line)
                if match:
                    current.gpa = match.group(1)
            elif current is not None:
                if not current.institution and re.search(r"university|college|institute|school", line, re.I):
                    current.institution = line
                dates = extract_date_range(line)
                if dates and not current.start_date:
                    current.start_date, current.end_date = dates
                match = GPA_RE.search(line)
                if match and not current.gpa:
                    current.gpa = match.group(1)

        return [e for e in entries if e.degree or e.institution]

    def _extract_skills(self, lines: List[str]) -> List[str]:
        skills: List[str] = []
        for line in self._section(lines, SKILLS_KEYWORDS):
            for token in re.split(r"[,;|•]", line):
                token = token.strip()
                if ':' in token:
                    token = token.split(':', 1)[1].strip()
                if (1 < len(token) < 50 and token not in skills
                        and not token.isdigit() and not is_section_header(token)):
                    skills.append(token)
        return skills
