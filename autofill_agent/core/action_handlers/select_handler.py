"""Handles select (dropdown) actions."""
from typing import Optional

from .base_handler import BaseActionHandler
from autofill_agent.core.exceptions import ActionExecutionError
from autofill_agent.tools.dropdown_matcher import DropdownMatcher


class SelectActionHandler(BaseActionHandler):
    """Chooses the select option matching the resolved value.

    Returns False, leaving the control untouched, when no option matches.
    """

    def __init__(self, timings, matcher: Optional[DropdownMatcher] = None):
        super().__init__(timings)
        self.matcher = matcher or DropdownMatcher()

    async def execute(self, context) -> bool:
        descriptor = context.descriptor
        control = descriptor.control
        try:
            options = await control.list_options()
        except Exception as e:
            raise ActionExecutionError(f"Could not read options of '{descriptor.display_name}': {e}") from e

        option = self.matcher.find_option(context.value, options)
        if option is None:
            self.logger.info(
                f"No option of '{descriptor.display_name}' matches '{context.value}' "
                f"({len(options)} options)"
            )
            return False

        try:
            await control.select_option(option.value)
        except Exception as e:
            raise ActionExecutionError(f"Could not select '{option.text}' in '{descriptor.display_name}': {e}") from e
        context.applied_value = option.text
        return True
