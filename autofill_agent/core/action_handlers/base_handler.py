"""Base class for action handlers."""
import asyncio
import logging
from typing import Any, Dict, Iterable, Optional


class BaseActionHandler:
    def __init__(self, timings):
        self.timings = timings
        self.logger = logging.getLogger(self.__class__.__name__)

    async def execute(self, context) -> bool:
        raise NotImplementedError("Subclasses must implement the execute method.")

    async def _dispatch(self, control, events: Iterable[str], init: Optional[Dict[str, Any]] = None):
        """Dispatch synthetic events on a control in order."""
        for event_type in events:
            await control.dispatch_event(event_type, init)

    @staticmethod
    async def _pause(seconds: float):
        if seconds and seconds > 0:
            await asyncio.sleep(seconds)
