"""Tools for formatting resolved values before they reach a control."""

import re
import logging
from typing import Optional
from datetime import datetime
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DATE_FORMATS = [
    "%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d", "%B %d, %Y", "%b %d, %Y", "%d %B %Y",
    "%Y-%m", "%m/%Y", "%B %Y", "%b %Y", "%Y",
]


@dataclass
class ValidationResult:
    """Result of data validation."""
    is_valid: bool
    formatted_value: Optional[str] = None
    error_message: Optional[str] = None


class DataFormatter:
    """Formats resolved values (trim, phone numbers, ISO dates)."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def format_text(self, value: str) -> ValidationResult:
        if not isinstance(value, str):
            return ValidationResult(is_valid=False, error_message=f"Expected string, got {type(value)}")
        return ValidationResult(is_valid=True, formatted_value=value.strip())

    def format_phone(self, value: str) -> ValidationResult:
        """Format a 10-digit number as (XXX) XXX-XXXX; anything else passes unchanged."""
        digits = re.sub(r"\D", "", value)
        if len(digits) == 10:
            return ValidationResult(is_valid=True,
                                    formatted_value=f"({digits[:3]}) {digits[3:6]}-{digits[6:]}")
        return ValidationResult(is_valid=False, formatted_value=value,
                                error_message="Not a 10-digit number")

    def format_date(self, value: str) -> ValidationResult:
        """Format a recognisable date as YYYY-MM-DD; unparseable text passes unchanged."""
        cleaned = value.strip()
        for fmt in DATE_FORMATS:
            try:
                date = datetime.strptime(cleaned, fmt)
                break
            except ValueError:
                continue
        else:
            return ValidationResult(is_valid=False, formatted_value=value, error_message="Invalid date format")
        return ValidationResult(is_valid=True, formatted_value=date.strftime("%Y-%m-%d"))

    def format_field_value(self, value: str, field_type: Optional[str] = None,
                           input_type: Optional[str] = None) -> str:
        """
        Post-process a resolved value for the control it is going into.

        Args:
            value: Resolved value
            field_type: Semantic field type id
            input_type: Control subtype (text, tel, date ...)

        Returns:
            The formatted value
        """
        result = self.format_text(value)
        formatted = result.formatted_value if result.is_valid else str(value).strip()

        if field_type == "phone" or input_type == "tel":
            formatted = self.format_phone(formatted).formatted_value
        elif input_type == "date":
            date_result = self.format_date(formatted)
            if not date_result.is_valid:
                self.logger.debug(f"Could not parse '{formatted}' as a date, leaving as is")
            formatted = date_result.formatted_value

        return formatted
