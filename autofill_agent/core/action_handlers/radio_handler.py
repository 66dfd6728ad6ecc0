"""Handles radio group actions."""
from typing import Optional

from .base_handler import BaseActionHandler
from autofill_agent.core.exceptions import ActionExecutionError
from autofill_agent.tools.dropdown_matcher import DropdownMatcher
from autofill_agent.tools.value_resolver import ValueResolver


class RadioGroupHandler(BaseActionHandler):
    """Checks the radio button whose label or value matches the resolved value.

    When nothing matches directly and the value reads as a yes/no answer, the
    answer is re-expressed in the group's own wording ("Authorized", "True",
    "1" ...) and matched again. Returns False when no member fits.
    """

    def __init__(self, timings, matcher: Optional[DropdownMatcher] = None):
        super().__init__(timings)
        self.matcher = matcher or DropdownMatcher()

    async def execute(self, context) -> bool:
        descriptor = context.descriptor
        control = descriptor.control
        options = await control.list_options()

        option = self.matcher.find_option(context.value, options)
        if option is None:
            intent = ValueResolver.to_intent(context.value)
            if intent is not None:
                labels = [o.text or o.value for o in options]
                option = self.matcher.find_option(ValueResolver.encode_intent(intent, labels), options)

        if option is None:
            self.logger.info(f"No radio in '{descriptor.display_name}' matches '{context.value}'")
            return False

        try:
            await control.select_option(option.value)
        except Exception as e:
            raise ActionExecutionError(f"Could not check '{option.text}' in '{descriptor.display_name}': {e}") from e
        context.applied_value = option.text or option.value
        return True
