"""Handles checkbox actions."""
from .base_handler import BaseActionHandler
from autofill_agent.core.exceptions import ActionExecutionError

CHECKED_VALUES = ('true', 'yes', 'y', '1', 'on', 'checked')


class CheckboxHandler(BaseActionHandler):
    """Checks or unchecks a checkbox from a yes/no style value."""

    async def execute(self, context) -> bool:
        descriptor = context.descriptor
        value = context.value
        if isinstance(value, str):
            target_state = value.strip().lower() in CHECKED_VALUES
        else:
            target_state = bool(value)
        self.logger.debug(f"Setting checkbox '{descriptor.display_name}' to {target_state}")
        try:
            await descriptor.control.set_checked(target_state)
        except Exception as e:
            raise ActionExecutionError(f"Could not set checkbox '{descriptor.display_name}': {e}") from e
        return True
