"""Verification of values after they have been written to a control."""

import logging

from thefuzz import fuzz

from autofill_agent.tools.constants import VERIFICATION_THRESHOLD

logger = logging.getLogger(__name__)


async def verify_input_value(control, expected_value: str, threshold: float = VERIFICATION_THRESHOLD) -> bool:
    """
    Check that a control holds (roughly) the value that was written to it.

    Masked inputs reformat what they receive, so the comparison is a fuzzy
    ratio rather than equality.

    Args:
        control: ControlAdapter that was written to
        expected_value: Value that was assigned
        threshold: Minimum similarity (0.0 to 1.0)

    Returns:
        True when the read-back value is similar enough, False otherwise
    """
    try:
        current_value = await control.read_value()
    except Exception as e:
        logger.debug(f"Could not read back value of {getattr(control, 'key', '?')}: {e}")
        return False

    expected = (expected_value or "").strip().lower()
    current = (current_value or "").strip().lower()
    if expected == current:
        return True

    similarity = fuzz.ratio(expected, current) / 100.0
    logger.debug(f"Comparing '{expected}' vs '{current}' -> similarity {similarity:.3f}")
    return similarity >= threshold
