"""Fill executor: drives each control through the fill state machine."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from autofill_agent.core.exceptions import ActionExecutionError, UploadError
from autofill_agent.core.models import FieldDescriptor, FillOutcome, FillStatus, StoredDocument
from autofill_agent.core.platform_detector import GENERIC_PLATFORM, PlatformProfile
from autofill_agent.tools import constants
from autofill_agent.tools.dropdown_matcher import DropdownMatcher
from autofill_agent.tools.field_catalog import FieldType

from .action_handlers.base_handler import BaseActionHandler
from .action_handlers.checkbox_handler import CheckboxHandler
from .action_handlers.fileupload_handler import FileUploadHandler
from .action_handlers.radio_handler import RadioGroupHandler
from .action_handlers.select_handler import SelectActionHandler
from .action_handlers.tag_handler import TagActionHandler
from .action_handlers.text_handler import TextActionHandler

logger = logging.getLogger(__name__)


class FieldState(Enum):
    IDLE = "idle"
    FOCUSED = "focused"
    VALUE_ASSIGNED = "value_assigned"
    EVENTS_DISPATCHED = "events_dispatched"
    SETTLED = "settled"


@dataclass(frozen=True)
class FillTimings:
    """Delays (seconds) and retry limits used while filling."""
    focus_delay: float = constants.FOCUS_DELAY
    token_input_delay: float = constants.TOKEN_INPUT_DELAY
    token_commit_delay: float = constants.TOKEN_COMMIT_DELAY
    post_upload_delay: float = constants.POST_UPLOAD_DELAY
    upload_retry_delay: float = constants.RETRY_DELAY_BASE
    upload_attempts: int = constants.UPLOAD_ATTEMPTS
    max_tokens: int = constants.MAX_TAG_TOKENS
    collect_attempts: int = constants.COLLECT_ATTEMPTS
    collect_retry_delay: float = constants.COLLECT_RETRY_DELAY
    honor_platform_waits: bool = True


@dataclass
class ActionContext:
    """Context for an action execution."""
    descriptor: FieldDescriptor
    value: Optional[str]
    platform: PlatformProfile
    field_type: Optional[FieldType] = None
    document: Optional[StoredDocument] = None
    applied_value: Optional[str] = None
    verified: Optional[bool] = None


class FillExecutor:
    """Applies resolved values to controls and tracks each control's fill state."""

    def __init__(self, platform: Optional[PlatformProfile] = None, timings: Optional[FillTimings] = None,
                 select_fuzzy_threshold: Optional[float] = None):
        """
        Initialize the executor and its handlers.

        Args:
            platform: Detected platform (drives events and settle waits)
            timings: Delays and retry limits
            select_fuzzy_threshold: Enables the fuzzy select fallback when set
        """
        self.platform = platform or GENERIC_PLATFORM
        self.timings = timings or FillTimings()
        self.logger = logging.getLogger(__name__)

        self.text_handler = TextActionHandler(self.timings)
        matcher = DropdownMatcher(select_fuzzy_threshold)
        self.select_handler = SelectActionHandler(self.timings, matcher)
        self.radio_handler = RadioGroupHandler(self.timings, matcher)
        self.tag_handler = TagActionHandler(self.timings)
        self.checkbox_handler = CheckboxHandler(self.timings)
        self.file_handler = FileUploadHandler(self.timings)

        self._states: Dict[str, FieldState] = {}
        self._pending: List[Tuple[FieldDescriptor, FillOutcome]] = []

    def state_of(self, descriptor: FieldDescriptor) -> FieldState:
        return self._states.get(descriptor.control.key, FieldState.IDLE)

    def _get_handler(self, descriptor: FieldDescriptor, value: str,
                     field_type: Optional[FieldType]) -> BaseActionHandler:
        """Pick the handler for a control kind and field type."""
        if descriptor.kind == "select":
            return self.select_handler
        if descriptor.kind == "radio":
            return self.radio_handler
        if descriptor.input_type == "checkbox":
            return self.checkbox_handler
        tag_like = (field_type is not None and field_type.multi_token) \
            or descriptor.role == "combobox" or descriptor.autocomplete in ("list", "both")
        if tag_like and "," in value:
            return self.tag_handler
        return self.text_handler

    async def _already_filled(self, descriptor: FieldDescriptor) -> bool:
        if self._states.get(descriptor.control.key) in (FieldState.SETTLED, FieldState.VALUE_ASSIGNED,
                                                        FieldState.EVENTS_DISPATCHED):
            return True
        try:
            return bool(await descriptor.control.is_marked())
        except Exception as e:
            self.logger.debug(f"Could not read fill marker of '{descriptor.display_name}': {e}")
            return False

    async def fill(self, descriptor: FieldDescriptor, value: str,
                   field_type: Optional[FieldType] = None) -> FillOutcome:
        """
        Fill one control with a resolved value.

        Args:
            descriptor: Target control
            value: Resolved value
            field_type: Classified field type, if any

        Returns:
            FillOutcome describing what happened; errors are reported, never raised
        """
        type_id = field_type.id if field_type else None
        outcome = FillOutcome(field=descriptor.display_name, status=FillStatus.FILLED,
                              field_type=type_id, value=value, attempts=1)

        if await self._already_filled(descriptor):
            outcome.status = FillStatus.SKIPPED_ALREADY_FILLED
            outcome.reason = "control already filled"
            outcome.attempts = 0
            return outcome

        key = descriptor.control.key
        handler = self._get_handler(descriptor, value, field_type)
        context = ActionContext(descriptor=descriptor, value=value, platform=self.platform, field_type=field_type)

        try:
            await descriptor.control.focus()
            self._states[key] = FieldState.FOCUSED
            await self._pause(self.timings.focus_delay)

            if not await handler.execute(context):
                self._states[key] = FieldState.IDLE
                outcome.status = FillStatus.SKIPPED_NO_MATCH
                outcome.reason = f"no option matches '{value}'"
                return outcome

            self._states[key] = FieldState.VALUE_ASSIGNED
            if context.applied_value is not None:
                outcome.value = context.applied_value
            if context.verified is False:
                outcome.reason = "value changed after assignment"

            if self.platform.event_strategy.trigger_on_each:
                await self._settle(descriptor)
                await self._pause(self._platform_wait())
            else:
                self._pending.append((descriptor, outcome))
        except ActionExecutionError as e:
            self._states[key] = FieldState.IDLE
            self.logger.warning(f"Fill failed for '{descriptor.display_name}': {e}")
            outcome.status = FillStatus.FAILED
            outcome.reason = str(e)
        except Exception as e:
            self._states[key] = FieldState.IDLE
            self.logger.error(f"Unexpected error filling '{descriptor.display_name}': {e}", exc_info=True)
            outcome.status = FillStatus.FAILED
            outcome.reason = str(e)

        return outcome

    async def upload(self, descriptor: FieldDescriptor, document: StoredDocument) -> FillOutcome:
        """
        Attach a stored document to a file input, retrying with a fixed backoff.

        Returns:
            FillOutcome; exhausting every attempt yields a failed outcome with the attempt count
        """
        outcome = FillOutcome(field=descriptor.display_name, status=FillStatus.FILLED,
                              field_type="resume", value=document.name)

        if await self._already_filled(descriptor):
            outcome.status = FillStatus.SKIPPED_ALREADY_FILLED
            outcome.reason = "document already attached"
            return outcome

        key = descriptor.control.key
        context = ActionContext(descriptor=descriptor, value=None, platform=self.platform, document=document)
        attempts = max(1, self.timings.upload_attempts)
        last_error = None

        for attempt in range(1, attempts + 1):
            outcome.attempts = attempt
            try:
                self._states[key] = FieldState.FOCUSED
                await self.file_handler.execute(context)
                self._states[key] = FieldState.EVENTS_DISPATCHED
                await self._mark(descriptor)
                self._states[key] = FieldState.SETTLED
                self.logger.info(f"Uploaded '{document.name}' on attempt {attempt}")
                return outcome
            except (UploadError, ActionExecutionError) as e:
                last_error = e
                self._states[key] = FieldState.IDLE
                self.logger.warning(f"Upload attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    await self._pause(self.timings.upload_retry_delay)

        outcome.status = FillStatus.FAILED
        outcome.reason = f"upload failed after {attempts} attempts: {last_error}"
        return outcome

    async def flush(self) -> int:
        """Dispatch deferred events for every queued control and settle them.

        Returns:
            Number of controls settled
        """
        pending, self._pending = self._pending, []
        settled = 0
        for descriptor, outcome in pending:
            try:
                await self._settle(descriptor)
                settled += 1
            except Exception as e:
                self._states[descriptor.control.key] = FieldState.IDLE
                self.logger.warning(f"Deferred events failed for '{descriptor.display_name}': {e}")
                outcome.status = FillStatus.FAILED
                outcome.reason = f"event dispatch failed: {e}"
        if pending:
            await self._pause(self._platform_wait())
        return settled

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def _settle(self, descriptor: FieldDescriptor):
        key = descriptor.control.key
        for event_type in self.platform.event_strategy.events:
            await descriptor.control.dispatch_event(event_type)
        self._states[key] = FieldState.EVENTS_DISPATCHED
        await self._mark(descriptor)
        self._states[key] = FieldState.SETTLED

    async def _mark(self, descriptor: FieldDescriptor):
        try:
            await descriptor.control.mark()
        except Exception as e:
            self.logger.debug(f"Could not mark '{descriptor.display_name}' as filled: {e}")

    def _platform_wait(self) -> float:
        if not self.timings.honor_platform_waits or not self.platform.characteristics.dynamic_forms:
            return 0.0
        return self.platform.event_strategy.wait_after_ms / 1000

    @staticmethod
    async def _pause(seconds: float):
        if seconds and seconds > 0:
            await asyncio.sleep(seconds)
