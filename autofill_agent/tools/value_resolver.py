"""Resolution of profile data into the value a classified field should receive."""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from autofill_agent.core.models import Education, Experience, FieldDescriptor, Profile, to_snake_case
from autofill_agent.tools.data_formatter import DataFormatter
from autofill_agent.tools.field_catalog import AFFIRMATIVE, NEGATIVE, FieldType, catalog_index, default_catalog
from autofill_agent.tools.field_identifier import is_yes_no_question

logger = logging.getLogger(__name__)

# Option vocabularies tried, in order, when re-encoding a yes/no intent.
INTENT_VOCABULARIES: List[Tuple[str, re.Pattern, re.Pattern]] = [
    ("yes/no", re.compile(r"^\s*yes\b", re.I), re.compile(r"^\s*no\b", re.I)),
    ("authorized",
     re.compile(r"^(?!.*\b(not|un)\s*authori[sz]ed).*\bauthori[sz]ed", re.I),
     re.compile(r"\b(not|un)\s*authori[sz]ed", re.I)),
    ("eligible",
     re.compile(r"^(?!.*\b(not|in)\s*eligible).*\beligible", re.I),
     re.compile(r"\b(not|in)\s*eligible", re.I)),
    ("true/false", re.compile(r"^\s*true\s*$", re.I), re.compile(r"^\s*false\s*$", re.I)),
    ("1/0", re.compile(r"^\s*1\s*$"), re.compile(r"^\s*0\s*$")),
]

_PRESENT = ("present", "current", "now", "today")
_RANGE_FORMATS = ["%Y-%m-%d", "%Y-%m", "%m/%Y", "%b %Y", "%B %Y", "%Y"]
DEFAULT_PHONE_TYPE = "Mobile"
START_DATE_LEAD = timedelta(weeks=2)


def split_name(full_name: str) -> Tuple[str, str]:
    """Split a full name into (first, rest)."""
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class ValueResolver:
    """Maps a classified field type plus the profile to the value to fill."""

    def __init__(self, catalog: Optional[List[FieldType]] = None, formatter: Optional[DataFormatter] = None):
        """
        Initialize the resolver.

        Args:
            catalog: Field types (needed for yes/no metadata)
            formatter: Post-processor for resolved values
        """
        self.types = catalog_index(catalog if catalog is not None else default_catalog())
        self.formatter = formatter or DataFormatter()
        self.logger = logging.getLogger(__name__)
        self._resolvers: Dict[str, Callable[[Profile], Any]] = {
            "firstName": lambda p: p.first_name or split_name(p.full_name)[0],
            "lastName": lambda p: p.last_name or split_name(p.full_name)[1],
            "fullName": self._full_name,
            "phoneType": lambda p: p.phone_type or DEFAULT_PHONE_TYPE,
            "location": self._location,
            "portfolio": lambda p: p.portfolio or p.website,
            "website": lambda p: p.website or p.portfolio,
            "university": lambda p: self._latest_education(p).institution,
            "degree": lambda p: self._latest_education(p).degree,
            "major": lambda p: self._latest_education(p).major,
            "gpa": lambda p: self._latest_education(p).gpa,
            "graduationDate": lambda p: self._latest_education(p).end_date,
            "currentCompany": lambda p: self._current_experience(p).company,
            "currentTitle": lambda p: self._current_experience(p).title,
            "employmentStartDate": lambda p: self._current_experience(p).start_date,
            "employmentEndDate": lambda p: self._current_experience(p).end_date,
            "responsibilities": lambda p: "\n".join(self._current_experience(p).responsibilities),
            "yearsExperience": lambda p: p.years_experience or self._years_of_experience(p.experiences),
            "skills": lambda p: p.skills or ", ".join(p.skills_list),
            "preferredLocation": lambda p: p.preferred_location or p.city,
            "availableStartDate": lambda p: p.available_start_date or (date.today() + START_DATE_LEAD).isoformat(),
            "salary": lambda p: p.desired_salary,
            "resume": lambda p: None,
        }

    def resolve(self, field_type_id: str, profile: Profile, descriptor: Optional[FieldDescriptor] = None,
                options: Optional[List[str]] = None) -> Optional[str]:
        """
        Resolve the value for a field.

        Args:
            field_type_id: Classified field type
            profile: Applicant profile
            descriptor: The control being filled (its subtype drives formatting)
            options: Option labels when the control is a select

        Returns:
            The value to fill, or None when the profile has nothing for this field
        """
        field_type = self.types.get(field_type_id)
        if field_type is not None and field_type.boolean:
            return self._resolve_yes_no(field_type, profile, options, descriptor)

        resolver = self._resolvers.get(field_type_id)
        raw = resolver(profile) if resolver else getattr(profile, to_snake_case(field_type_id), None)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            self.logger.debug(f"No profile value for {field_type_id}")
            return None

        input_type = descriptor.input_type if descriptor else None
        return self.formatter.format_field_value(str(raw), field_type_id, input_type)

    def _resolve_yes_no(self, field_type: FieldType, profile: Profile, options: Optional[List[str]],
                        descriptor: Optional[FieldDescriptor] = None) -> Optional[str]:
        raw = getattr(profile, to_snake_case(field_type.id), None)
        if self._wants_free_text(descriptor, options) and isinstance(raw, str) and raw.strip():
            return raw.strip()
        intent = self.to_intent(raw, field_type)
        if intent is None:
            if isinstance(raw, str) and raw.strip():
                # free-text answer that is neither yes nor no; let the control match it directly
                return raw.strip()
            intent = field_type.default_intent
        if intent is None:
            self.logger.debug(f"No answer and no default for {field_type.id}")
            return None
        return self.encode_intent(intent, options)

    @staticmethod
    def _wants_free_text(descriptor: Optional[FieldDescriptor], options: Optional[List[str]]) -> bool:
        """True for a typed control whose label is not phrased as a yes/no question."""
        if options or descriptor is None or descriptor.kind not in ("input", "textarea", "contenteditable"):
            return False
        label = descriptor.label or descriptor.aria_label or descriptor.placeholder
        return bool(label) and not is_yes_no_question(label)

    @staticmethod
    def to_intent(raw: Any, field_type: Optional[FieldType] = None) -> Optional[bool]:
        """Translate a raw profile answer into True/False, or None when unknown."""
        if raw is None:
            return None
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, (int, float)):
            return bool(raw)
        affirmative, negative = AFFIRMATIVE, NEGATIVE
        if field_type is not None and field_type.answer_vocabulary:
            affirmative, negative = field_type.answer_vocabulary
        text = str(raw).strip().lower()
        if not text:
            return None
        if text in negative:
            return False
        if text in affirmative:
            return True
        first_word = re.split(r"[\s,.;:!]+", text, maxsplit=1)[0]
        if first_word in ("no", "n", "false"):
            return False
        if first_word in ("yes", "y", "true"):
            return True
        return None

    @staticmethod
    def encode_intent(intent: bool, options: Optional[List[str]] = None) -> str:
        """Express an intent in the vocabulary of the control's options."""
        for _, positive, negative in INTENT_VOCABULARIES:
            pattern = positive if intent else negative
            for option in options or []:
                if option and pattern.search(option):
                    return option
        return "Yes" if intent else "No"

    def _full_name(self, profile: Profile) -> str:
        if profile.full_name:
            return profile.full_name
        return " ".join(part for part in (profile.first_name, profile.last_name) if part)

    def _location(self, profile: Profile) -> str:
        if profile.location:
            return profile.location
        return ", ".join(part for part in (profile.city, profile.state) if part)

    @staticmethod
    def _current_experience(profile: Profile) -> Experience:
        if not profile.experiences:
            return Experience()
        for exp in profile.experiences:
            if exp.current:
                return exp
        return profile.experiences[0]

    @staticmethod
    def _latest_education(profile: Profile) -> Education:
        return profile.education[0] if profile.education else Education()

    def _years_of_experience(self, experiences: List[Experience]) -> Optional[str]:
        months = 0
        parsed_any = False
        for exp in experiences:
            start = self._parse_month(exp.start_date)
            if start is None:
                continue
            end = self._parse_month(exp.end_date) if exp.end_date else None
            if end is None:
                if exp.end_date and exp.end_date.strip().lower() not in _PRESENT:
                    continue
                end = datetime.now()
            months += max(0, (end.year - start.year) * 12 + end.month - start.month)
            parsed_any = True
        if not parsed_any:
            return None
        return str(months // 12)

    @staticmethod
    def _parse_month(text: str) -> Optional[datetime]:
        cleaned = (text or "").strip()
        for fmt in _RANGE_FORMATS:
            try:
                return datetime.strptime(cleaned, fmt)
            except ValueError:
                continue
        return None
