"""Handles multi-token (tag / chip) inputs such as skills fields."""
from .base_handler import BaseActionHandler
from autofill_agent.core.exceptions import ActionExecutionError

ENTER_KEY = {"key": "Enter", "code": "Enter", "keyCode": 13, "which": 13, "bubbles": True}


class TagActionHandler(BaseActionHandler):
    """Fills tag inputs in two phases.

    Phase one writes the whole comma-separated value and fires the platform
    events, which is enough for plain inputs. On platforms that dispatch
    events once after all fields, phase one leaves them to the executor's
    flush. Phase two types each token and commits it with Enter so chip
    widgets pick them up; a token that fails is logged and the rest continue.
    """

    async def execute(self, context) -> bool:
        descriptor = context.descriptor
        control = descriptor.control
        value = context.value
        tokens = [t.strip() for t in value.split(",") if t.strip()]

        try:
            await control.write_value(value)
            strategy = context.platform.event_strategy
            if strategy.trigger_on_each:
                await self._dispatch(control, strategy.events)
        except Exception as e:
            raise ActionExecutionError(f"Could not assign tags to '{descriptor.display_name}': {e}") from e
        await self._pause(self.timings.token_commit_delay)

        added = 0
        for token in tokens[: self.timings.max_tokens]:
            try:
                await control.write_value(token)
                await control.dispatch_event("input")
                await self._pause(self.timings.token_input_delay)
                await control.dispatch_event("keydown", ENTER_KEY)
                await self._pause(self.timings.token_commit_delay)
                added += 1
            except Exception as e:
                self.logger.warning(f"Could not add token '{token}' to '{descriptor.display_name}': {e}")

        self.logger.debug(f"Added {added}/{len(tokens)} tokens to '{descriptor.display_name}'")
        return True
