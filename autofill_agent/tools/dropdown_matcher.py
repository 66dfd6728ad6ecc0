"""Tools for matching a resolved value against select options."""

import logging
import re
from typing import Callable, List, Optional, Tuple

from thefuzz import fuzz

from autofill_agent.core.models import SelectOption

logger = logging.getLogger(__name__)


class DropdownMatcher:
    """Finds the option a resolved value should select.

    Strategies run in order and the first hit wins:

    1. exact value
    2. exact text
    3. option value contains the term
    4. option text contains the term
    5. the term contains the option text
    6. (only with ``fuzzy_threshold``) best thefuzz ratio at or above the threshold
    """

    def __init__(self, fuzzy_threshold: Optional[float] = None):
        """
        Initialize the dropdown matcher.

        Args:
            fuzzy_threshold: Minimum similarity (0.0 to 1.0) for the fuzzy fallback;
                None disables the fallback
        """
        self.fuzzy_threshold = fuzzy_threshold
        self.logger = logging.getLogger(__name__)

    def normalize_text(self, text: str) -> str:
        """Basic text normalization."""
        return re.sub(r'\s+', ' ', (text or "").lower().strip())

    def find_option(self, term: str, options: List[SelectOption]) -> Optional[SelectOption]:
        """
        Find the option to select for a term.

        Args:
            term: Resolved value
            options: Options of the select control

        Returns:
            The matching option, or None when no strategy matches
        """
        target = self.normalize_text(term)
        if not target or not options:
            return None

        normalized = [(opt, self.normalize_text(opt.value), self.normalize_text(opt.text)) for opt in options]

        strategies: List[Tuple[str, Callable[[str, str], bool]]] = [
            ("exact value", lambda value, text: value == target),
            ("exact text", lambda value, text: text == target),
            ("value contains term", lambda value, text: bool(value) and target in value),
            ("text contains term", lambda value, text: bool(text) and target in text),
            ("term contains text", lambda value, text: bool(text) and text in target),
        ]

        for name, predicate in strategies:
            for opt, value, text in normalized:
                if predicate(value, text):
                    self.logger.debug(f"Matched '{term}' to option '{opt.text}' by {name}")
                    return opt

        if self.fuzzy_threshold is not None:
            return self._fuzzy_match(target, normalized)

        self.logger.debug(f"No option matched '{term}'")
        return None

    def _fuzzy_match(self, target: str, normalized) -> Optional[SelectOption]:
        best, best_score = None, 0
        for opt, _, text in normalized:
            if not text:
                continue
            score = fuzz.ratio(target, text)
            if score > best_score:
                best, best_score = opt, score
        if best is not None and best_score >= self.fuzzy_threshold * 100:
            self.logger.debug(f"Fuzzy matched '{target}' to '{best.text}' ({best_score})")
            return best
        return None
