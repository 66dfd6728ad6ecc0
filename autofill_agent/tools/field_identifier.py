"""Semantic classification of collected form fields."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from autofill_agent.core.models import FieldDescriptor, MatchResult
from autofill_agent.tools.constants import (
    CONTEXT_WEIGHT,
    DEFAULT_CONFIDENCE_THRESHOLD,
    KEYWORD_WEIGHT,
    MAX_ALTERNATES,
    NEUTRAL_CONTEXT_SCORE,
    PATTERN_WEIGHT,
    SECTION_CONTEXT_CREDIT,
    TYPE_WEIGHT,
)
from autofill_agent.tools.field_catalog import FieldType, default_catalog

logger = logging.getLogger(__name__)

LINKEDIN_TYPE = "linkedin"

QUESTION_PATTERNS = {
    "yes_no": re.compile(r"^(are|do|will|have|can|would|is|did|has)\s+you\b", re.IGNORECASE),
    "what": re.compile(r"^(what|where|which)\b", re.IGNORECASE),
    "how_many": re.compile(r"^how\s+(many|much|long)\b", re.IGNORECASE),
    "when": re.compile(r"^when\b", re.IGNORECASE),
}


@dataclass(frozen=True)
class ScoringWeights:
    """Relative weight of each classification signal."""
    keyword: float = KEYWORD_WEIGHT
    pattern: float = PATTERN_WEIGHT
    context: float = CONTEXT_WEIGHT
    type: float = TYPE_WEIGHT


def question_kind(text: str) -> Optional[str]:
    """Classify a question label as yes_no, what, how_many or when.

    Args:
        text: Label or question text

    Returns:
        The question kind, or None when the text is not a recognised question
    """
    cleaned = (text or "").strip()
    for kind, pattern in QUESTION_PATTERNS.items():
        if pattern.search(cleaned):
            return kind
    return None


def is_yes_no_question(text: str) -> bool:
    return question_kind(text) == "yes_no"


class SemanticFieldClassifier:
    """Scores every catalog field type against a descriptor and picks the best."""

    def __init__(
        self,
        catalog: Optional[List[FieldType]] = None,
        weights: Optional[ScoringWeights] = None,
        default_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ):
        """
        Initialize the classifier.

        Args:
            catalog: Field types to score against (defaults to the built-in catalog)
            weights: Signal weights
            default_threshold: Acceptance threshold when no platform supplies one
        """
        self.catalog = catalog if catalog is not None else default_catalog()
        self.weights = weights or ScoringWeights()
        self.default_threshold = default_threshold
        self.logger = logging.getLogger(__name__)

    def classify(self, descriptor: FieldDescriptor, platform=None, section: Optional[str] = None) -> MatchResult:
        """
        Classify a field descriptor.

        Args:
            descriptor: The collected field
            platform: Detected PlatformProfile, used for overrides and its threshold
            section: Section heading hint (defaults to the descriptor's own section)

        Returns:
            MatchResult with the accepted type (or None), confidence and alternates
        """
        if section is None:
            section = descriptor.section

        override = self._platform_override(descriptor, platform)
        if override:
            self.logger.debug(f"Platform override matched '{descriptor.display_name}' -> {override}")
            return MatchResult(field_type=override, confidence=1.0, alternates=[(override, 1.0)],
                               evidence="platform override")

        search = descriptor.search_text
        section_text = (section or "").lower()

        candidates = self.catalog
        if LINKEDIN_TYPE in search:
            candidates = [ft for ft in self.catalog if ft.id == LINKEDIN_TYPE]

        scored: List[Tuple[str, float, FieldType]] = []
        for field_type in candidates:
            score = self.score(field_type, descriptor, section_text)
            if score > 0:
                scored.append((field_type.id, score, field_type))

        scored.sort(key=lambda item: item[1], reverse=True)
        alternates = [(type_id, round(score, 4)) for type_id, score, _ in scored[:MAX_ALTERNATES]]

        if not scored:
            return MatchResult(field_type=None, confidence=0.0, alternates=[], evidence="no signals")

        best_id, best_score, best_type = scored[0]
        threshold = self._threshold(platform)
        evidence = self._evidence(best_type, search)

        if best_score >= threshold:
            self.logger.debug(f"Classified '{descriptor.display_name}' as {best_id} ({best_score:.2f}) {evidence}")
            return MatchResult(field_type=best_id, confidence=best_score, alternates=alternates, evidence=evidence)

        self.logger.debug(
            f"No confident type for '{descriptor.display_name}': best {best_id} at {best_score:.2f} < {threshold}"
        )
        return MatchResult(field_type=None, confidence=best_score, alternates=alternates, evidence=evidence)

    def score(self, field_type: FieldType, descriptor: FieldDescriptor, section: str = "") -> float:
        """Weighted score of one field type for a descriptor, clamped to [0, 1]."""
        search = descriptor.search_text
        if any(term in search for term in field_type.exclude):
            return 0.0

        w = self.weights
        total = (
            w.keyword * self._keyword_coverage(field_type, search)
            + w.pattern * self._pattern_hit(field_type, search)
            + w.context * self._context_score(field_type, search, section.lower())
            + w.type * self._type_bonus(field_type, descriptor)
        ) * field_type.weight
        return max(0.0, min(1.0, total))

    @staticmethod
    def _keyword_coverage(field_type: FieldType, search: str) -> float:
        if not field_type.keywords:
            return 0.0
        found = sum(
            1 for keyword in field_type.keywords
            if any(synonym in search for synonym in keyword.split("|"))
        )
        return found / len(field_type.keywords)

    @staticmethod
    def _pattern_hit(field_type: FieldType, search: str) -> float:
        return 1.0 if any(p.search(search) for p in field_type.patterns) else 0.0

    @staticmethod
    def _context_score(field_type: FieldType, search: str, section: str) -> float:
        if not field_type.context:
            return NEUTRAL_CONTEXT_SCORE
        credit = 0.0
        for tag in field_type.context:
            if tag in search:
                credit += 1.0
            elif section and tag in section:
                credit += SECTION_CONTEXT_CREDIT
        return min(1.0, credit / len(field_type.context))

    @staticmethod
    def _type_bonus(field_type: FieldType, descriptor: FieldDescriptor) -> float:
        subtype = descriptor.input_type
        if descriptor.kind in ("textarea", "file"):
            subtype = descriptor.kind
        return 1.0 if subtype in field_type.expected_input_types else 0.5

    @staticmethod
    def _evidence(field_type: FieldType, search: str) -> str:
        matched = [
            synonym for keyword in field_type.keywords
            for synonym in keyword.split("|") if synonym in search
        ]
        pattern_count = sum(1 for p in field_type.patterns if p.search(search))
        return f"Keywords: {', '.join(matched) or 'none'} | Patterns: {pattern_count} matched"

    def _threshold(self, platform) -> float:
        if platform is not None and getattr(platform, "confidence_threshold", None) is not None:
            return platform.confidence_threshold
        return self.default_threshold

    @staticmethod
    def _platform_override(descriptor: FieldDescriptor, platform) -> Optional[str]:
        if platform is None:
            return None
        identifiers = descriptor.identifiers
        if not identifiers:
            return None
        for type_id, values in platform.field_patterns.items():
            if any(v.lower() in identifiers for v in values):
                return type_id
        return None
