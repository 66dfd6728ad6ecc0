"""Handles text input actions."""
from .base_handler import BaseActionHandler
from autofill_agent.core.exceptions import ActionExecutionError
from autofill_agent.tools.verification_helper import verify_input_value


class TextActionHandler(BaseActionHandler):
    """Assigns values to text-like inputs, textareas and contenteditable regions.

    The value is read back afterwards; a control that rewrote it beyond
    recognition is reported through ``context.verified``.
    """

    async def execute(self, context) -> bool:
        descriptor = context.descriptor
        self.logger.debug(f"Assigning '{context.value}' to '{descriptor.display_name}'")
        try:
            await descriptor.control.write_value(context.value)
        except Exception as e:
            raise ActionExecutionError(f"Could not assign value to '{descriptor.display_name}': {e}") from e

        context.verified = await verify_input_value(descriptor.control, context.value)
        if not context.verified:
            self.logger.warning(f"Value of '{descriptor.display_name}' does not match what was assigned")
        return True
