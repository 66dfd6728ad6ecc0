"""Data structures shared by the collector, classifier, resolver and executor."""

import logging
import re
from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')


def to_snake_case(key: str) -> str:
    """Convert a camelCase (or already snake_case) key to snake_case."""
    return _CAMEL_BOUNDARY.sub('_', key).replace('-', '_').lower()


@dataclass(frozen=True)
class FieldDescriptor:
    """Immutable snapshot of one fillable control, rebuilt on every collection pass."""
    control: Any
    kind: str  # input | textarea | contenteditable | select | radio | file
    input_type: str = "text"
    name: str = ""
    id: str = ""
    placeholder: str = ""
    label: str = ""
    aria_label: str = ""
    test_id: str = ""
    automation_id: str = ""
    title: str = ""
    class_name: str = ""
    accept: str = ""
    role: str = ""
    autocomplete: str = ""
    section: str = ""
    visible: bool = True

    @property
    def search_text(self) -> str:
        """Lowercased concatenation of every descriptive attribute."""
        parts = [
            self.label, self.name, self.id, self.placeholder,
            self.aria_label, self.test_id, self.title, self.class_name,
        ]
        return " ".join(p for p in parts if p).lower()

    @property
    def display_name(self) -> str:
        """Name used when reporting on this control."""
        return self.label or self.aria_label or self.name or self.id or self.placeholder or f"<{self.kind}>"

    @property
    def identifiers(self) -> List[str]:
        """Attribute values a platform override can match against."""
        return [v.lower() for v in (self.name, self.id, self.test_id, self.automation_id) if v]


@dataclass(frozen=True)
class SelectOption:
    """One option of a select control."""
    value: str
    text: str


@dataclass
class MatchResult:
    """Outcome of classifying one field descriptor."""
    field_type: Optional[str]
    confidence: float
    alternates: List[tuple] = field(default_factory=list)
    evidence: str = ""

    @property
    def matched(self) -> bool:
        return self.field_type is not None


class FillStatus(str, Enum):
    FILLED = "filled"
    SKIPPED_NO_MATCH = "skipped-no-match"
    SKIPPED_NO_VALUE = "skipped-no-value"
    SKIPPED_ALREADY_FILLED = "skipped-already-filled"
    FAILED = "failed"


@dataclass
class FillOutcome:
    """Per-field result of a run."""
    field: str
    status: FillStatus
    field_type: Optional[str] = None
    reason: str = ""
    value: Optional[str] = None
    attempts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class RunSummary:
    """Aggregate result of one orchestrator run."""
    outcomes: List[FillOutcome] = field(default_factory=list)
    platform: Optional[str] = None
    special_handling: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def filled_count(self) -> int:
        return self.count(FillStatus.FILLED)

    def count(self, status: FillStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "platform": self.platform,
            "special_handling": list(self.special_handling),
            "skipped": self.skipped,
            "filled_count": self.filled_count,
            "counts": {s.value: self.count(s) for s in FillStatus},
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


@dataclass
class StoredDocument:
    """A stored file payload; data is base64 text, optionally a data: URL."""
    data: str
    name: str = "resume.pdf"
    media_type: str = "application/pdf"


def _from_mapping(cls, data: Dict[str, Any], aliases: Dict[str, str]):
    """Build a dataclass from a dict with camelCase or snake_case keys."""
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for raw_key, value in data.items():
        key = to_snake_case(raw_key)
        key = aliases.get(key, key)
        if key in known:
            kwargs[key] = value
        else:
            logger.debug(f"Ignoring unknown {cls.__name__} key '{raw_key}'")
    return cls(**kwargs)


@dataclass
class Experience:
    company: str = ""
    title: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    responsibilities: List[str] = field(default_factory=list)
    current: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Experience":
        exp = _from_mapping(cls, data, {"employer": "company", "position": "title", "description": "responsibilities"})
        if isinstance(exp.responsibilities, str):
            exp.responsibilities = [line.strip() for line in exp.responsibilities.splitlines() if line.strip()]
        return exp


@dataclass
class Education:
    institution: str = ""
    degree: str = ""
    major: str = ""
    gpa: str = ""
    start_date: str = ""
    end_date: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Education":
        return _from_mapping(cls, data, {
            "university": "institution",
            "school": "institution",
            "field_of_study": "major",
            "graduation_date": "end_date",
        })


_PROFILE_ALIASES = {
    "postal_code": "zip_code",
    "zip": "zip_code",
    "skills_array": "skills_list",
    "experience": "experiences",
    "address_line1": "address",
    "address_line2": "address2",
    "linked_in": "linkedin",
    "git_hub": "github",
    "summary": "professional_summary",
    "start_date": "available_start_date",
    "salary": "desired_salary",
    "over18": "legal_age",
    "over_18": "legal_age",
    "how_did_you_hear": "referral_source",
    "sponsorship": "require_sponsorship",
    "resume_file": "resume",
}

# Nested values that are payloads in their own right rather than groups of profile keys.
_UNFLATTENED_KEYS = ("resume", "resume_file")


@dataclass
class Profile:
    """Structured applicant record every fill value is resolved from."""
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    full_name: str = ""
    preferred_name: str = ""
    email: str = ""
    phone: str = ""
    phone_country_code: str = ""
    phone_type: str = ""
    address: str = ""
    address2: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    portfolio: str = ""
    website: str = ""
    # yes/no answers: bool, free text, or None for "not answered"
    work_authorization: Any = None
    require_sponsorship: Any = None
    legal_right_to_work: Any = None
    legal_age: Any = None
    background_check: Any = None
    willing_to_relocate: Any = None
    previously_employed: Any = None
    security_clearance: Any = None
    government_employee: Any = None
    family_government_employee: Any = None
    debarred: Any = None
    restricted_country_citizen: Any = None
    experiences: List[Experience] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    years_experience: str = ""
    skills: str = ""
    skills_list: List[str] = field(default_factory=list)
    languages: str = ""
    certifications: str = ""
    professional_summary: str = ""
    cover_letter: str = ""
    additional_info: str = ""
    gender: str = ""
    race: str = ""
    hispanic_latino: Any = None
    veteran_status: str = ""
    disability: str = ""
    pronouns: str = ""
    preferred_location: str = ""
    available_start_date: str = ""
    desired_salary: str = ""
    notice_period: str = ""
    referral_source: str = ""
    referrer_name: str = ""
    resume: Optional[StoredDocument] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        """Create a profile from a camelCase or snake_case dictionary.

        Nested ``personal``/``contact``/``preferences`` style groups are flattened
        one level so both flat and grouped profile files load.
        """
        flat: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict) and to_snake_case(key) not in _UNFLATTENED_KEYS:
                flat.update(value)
            else:
                flat[key] = value

        profile = _from_mapping(cls, flat, _PROFILE_ALIASES)

        profile.experiences = [
            e if isinstance(e, Experience) else Experience.from_dict(e)
            for e in (profile.experiences or [])
        ]
        profile.education = [
            e if isinstance(e, Education) else Education.from_dict(e)
            for e in (profile.education or [])
        ]
        if isinstance(profile.resume, dict):
            profile.resume = _from_mapping(StoredDocument, profile.resume, {"type": "media_type", "filename": "name"})
        if isinstance(profile.skills, list):
            if not profile.skills_list:
                profile.skills_list = list(profile.skills)
            profile.skills = ", ".join(profile.skills)
        for name in ("zip_code", "phone", "years_experience", "desired_salary"):
            value = getattr(profile, name)
            if isinstance(value, (int, float)):
                setattr(profile, name, str(value))
        return profile

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
