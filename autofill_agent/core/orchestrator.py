"""Autofill orchestrator: sequences detection, collection, classification and filling."""

import asyncio
import inspect
import logging
from contextlib import nullcontext
from typing import Any, Callable, List, Optional

from autofill_agent.core.action_executor import FillExecutor, FillTimings
from autofill_agent.core.diagnostics_manager import DiagnosticsManager
from autofill_agent.core.field_collector import FieldCollector
from autofill_agent.core.models import FieldDescriptor, FillOutcome, FillStatus, Profile, RunSummary
from autofill_agent.core.platform_detector import PlatformDetector, PlatformProfile
from autofill_agent.tools.constants import WATCH_INTERVAL, WATCH_SETTLE_DELAY
from autofill_agent.tools.field_catalog import catalog_index
from autofill_agent.tools.field_identifier import SemanticFieldClassifier
from autofill_agent.tools.value_resolver import ValueResolver

logger = logging.getLogger(__name__)

RUN_FIELD = "<run>"
RESUME_ACCEPT_HINTS = (".pdf", ".doc", "application/pdf", "application/msword")


class AutofillOrchestrator:
    """Runs one autofill pass over a page at a time."""

    def __init__(
        self,
        page,
        classifier: Optional[SemanticFieldClassifier] = None,
        resolver: Optional[ValueResolver] = None,
        platform_catalog: Optional[List[PlatformProfile]] = None,
        timings: Optional[FillTimings] = None,
        config=None,
        diagnostics_manager: Optional[DiagnosticsManager] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            page: PageAdapter for the document to fill
            classifier: Field classifier (built from config when omitted)
            resolver: Value resolver
            platform_catalog: Platform profiles for detection
            timings: Fill delays and retry limits (config or defaults when omitted)
            config: Optional Config supplying scoring, timing and select settings
            diagnostics_manager: Optional stage/action tracker
        """
        self.page = page
        self.config = config
        self.logger = logging.getLogger(__name__)

        if classifier is None:
            if config is not None:
                classifier = SemanticFieldClassifier(
                    weights=config.get_scoring_weights(),
                    default_threshold=config.get("scoring.confidence_threshold", 0.5),
                )
            else:
                classifier = SemanticFieldClassifier()
        self.classifier = classifier
        self.resolver = resolver or ValueResolver(catalog=self.classifier.catalog)
        self.field_types = catalog_index(self.classifier.catalog)
        self.timings = timings or (config.get_fill_timings() if config is not None else FillTimings())
        self.select_fuzzy_threshold = config.get("select.fuzzy_threshold") if config is not None else None
        self.diagnostics_manager = diagnostics_manager

        self.detector = PlatformDetector(page, catalog=platform_catalog)
        self.collector = FieldCollector(page)
        self.last_url: Optional[str] = None
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def run(self, profile: Profile) -> RunSummary:
        """
        Fill every recognisable field on the page from a profile.

        A call made while another run is in progress returns immediately with
        ``skipped=True``. Errors never propagate; an unexpected failure is
        reported as a failed outcome for the field ``<run>``.
        """
        if self._busy:
            self.logger.info("Autofill already in progress, ignoring request")
            return RunSummary(skipped=True)

        self._busy = True
        summary = RunSummary()
        try:
            await self._run(profile, summary)
        except Exception as e:
            self.logger.error(f"Autofill run failed: {e}", exc_info=True)
            summary.outcomes.append(FillOutcome(field=RUN_FIELD, status=FillStatus.FAILED, reason=str(e)))
        finally:
            self._busy = False

        self.logger.info(
            f"Autofill finished: {summary.filled_count} filled, "
            f"{summary.count(FillStatus.SKIPPED_NO_MATCH)} unmatched, "
            f"{summary.count(FillStatus.SKIPPED_NO_VALUE)} without value, "
            f"{summary.count(FillStatus.FAILED)} failed"
        )
        return summary

    async def _run(self, profile: Profile, summary: RunSummary):
        self.detector.reset()
        with self._stage("detect_platform"):
            platform = await self.detector.detect()
        self.last_url = self.detector.last_url
        summary.platform = platform.name
        summary.special_handling = sorted(platform.special_handling)

        with self._stage("collect_fields"):
            fields = await self.collector.collect_with_retry(
                self.timings.collect_attempts, self.timings.collect_retry_delay)

        executor = FillExecutor(platform, self.timings, self.select_fuzzy_threshold)
        uploads = [d for d in fields if d.kind == "file"]
        others = [d for d in fields if d.kind != "file"]

        if platform.characteristics.upload_first:
            await self._upload_documents(uploads, profile, executor, platform, summary)
        with self._stage("fill_fields"):
            await self._fill_fields(others, profile, executor, platform, summary)
            await executor.flush()
        if not platform.characteristics.upload_first:
            await self._upload_documents(uploads, profile, executor, platform, summary)

    async def _fill_fields(self, fields: List[FieldDescriptor], profile: Profile, executor: FillExecutor,
                           platform: PlatformProfile, summary: RunSummary):
        delay = platform.characteristics.delay_ms / 1000 if platform.characteristics.requires_delays else 0
        for index, descriptor in enumerate(fields):
            self._start_action("fill", descriptor)
            outcome = await self._fill_one(descriptor, profile, executor, platform)
            summary.outcomes.append(outcome)
            self._end_action(outcome)
            if delay and index < len(fields) - 1:
                await asyncio.sleep(delay)

    async def _fill_one(self, descriptor: FieldDescriptor, profile: Profile, executor: FillExecutor,
                        platform: PlatformProfile) -> FillOutcome:
        name = descriptor.display_name
        try:
            match = self.classifier.classify(descriptor, platform, section=descriptor.section)
            if not match.matched:
                self.logger.debug(f"Skipping '{name}': no confident field type ({match.confidence:.2f})")
                return FillOutcome(field=name, status=FillStatus.SKIPPED_NO_MATCH,
                                   reason=f"best confidence {match.confidence:.2f} below threshold")

            options = None
            if descriptor.kind in ("select", "radio"):
                options = [o.text for o in await descriptor.control.list_options()]

            value = self.resolver.resolve(match.field_type, profile, descriptor, options)
            if value is None:
                self.logger.info(f"No profile value for '{name}' ({match.field_type})")
                return FillOutcome(field=name, status=FillStatus.SKIPPED_NO_VALUE, field_type=match.field_type,
                                   reason="profile has no value for this field")

            return await executor.fill(descriptor, value, self.field_types.get(match.field_type))
        except Exception as e:
            self.logger.error(f"Error processing field '{name}': {e}", exc_info=True)
            return FillOutcome(field=name, status=FillStatus.FAILED, reason=str(e))

    async def _upload_documents(self, uploads: List[FieldDescriptor], profile: Profile, executor: FillExecutor,
                                platform: PlatformProfile, summary: RunSummary):
        if not uploads:
            return
        with self._stage("upload_resume"):
            for descriptor in uploads:
                name = descriptor.display_name
                match = self.classifier.classify(descriptor, platform, section=descriptor.section)
                if not self._is_resume_input(descriptor, match.field_type):
                    summary.outcomes.append(FillOutcome(
                        field=name, status=FillStatus.SKIPPED_NO_VALUE, field_type=match.field_type,
                        reason="no stored document for this upload"))
                    continue
                if profile.resume is None:
                    summary.outcomes.append(FillOutcome(
                        field=name, status=FillStatus.SKIPPED_NO_VALUE, field_type="resume",
                        reason="profile has no stored resume"))
                    continue
                self._start_action("upload", descriptor)
                outcome = await executor.upload(descriptor, profile.resume)
                summary.outcomes.append(outcome)
                self._end_action(outcome)

    @staticmethod
    def _is_resume_input(descriptor: FieldDescriptor, field_type: Optional[str]) -> bool:
        if field_type == "resume":
            return True
        text = descriptor.search_text
        if field_type is not None or "cover" in text:
            return False
        accept = descriptor.accept.lower()
        return "resume" in text or "cv" in text or any(hint in accept for hint in RESUME_ACCEPT_HINTS)

    def _stage(self, name: str):
        if self.diagnostics_manager is not None:
            return self.diagnostics_manager.track_stage(name)
        return nullcontext()

    def _start_action(self, action_type: str, descriptor: FieldDescriptor):
        if self.diagnostics_manager is not None:
            self.diagnostics_manager.start_action(action_type, {"field": descriptor.display_name})

    def _end_action(self, outcome: FillOutcome):
        if self.diagnostics_manager is not None:
            self.diagnostics_manager.end_action(outcome.status != FillStatus.FAILED, outcome.reason or None)

    def watch_navigation(self, profile_provider: Callable[[], Any], interval: float = WATCH_INTERVAL,
                         settle_delay: float = WATCH_SETTLE_DELAY, watch_new_fields: bool = True) -> "PageChangeWatcher":
        """Start re-running autofill whenever the page location changes.

        Must be called from a running event loop. Returns the watcher; call
        ``await watcher.stop()`` (or use it as an async context manager) to end it.
        """
        watcher = PageChangeWatcher(self, profile_provider, interval, settle_delay, watch_new_fields)
        watcher.start()
        return watcher


class PageChangeWatcher:
    """
    Polls the page and triggers a new run after each change.

    A change is a new location or, with ``watch_new_fields``, more controls
    than the previous poll saw (fields rendered after the first pass). Runs
    are idempotent, so a re-run only touches controls that are not filled yet.
    """

    def __init__(self, orchestrator: AutofillOrchestrator, profile_provider: Callable[[], Any],
                 interval: float = WATCH_INTERVAL, settle_delay: float = WATCH_SETTLE_DELAY,
                 watch_new_fields: bool = True):
        self.orchestrator = orchestrator
        self.profile_provider = profile_provider
        self.interval = interval
        self.settle_delay = settle_delay
        self.watch_new_fields = watch_new_fields
        self.summaries: List[RunSummary] = []
        self.logger = logging.getLogger(__name__)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._poll())

    async def stop(self):
        """Cancel the polling task; safe to call more than once."""
        task, self._task = self._task, None
        if task is None:
            return
        if task.done():
            if not task.cancelled() and task.exception() is not None:
                self.logger.error(f"Page-change watcher had stopped with an error: {task.exception()}",
                                  exc_info=task.exception())
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.logger.debug("Page-change watcher stopped")

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
        return False

    async def _poll(self):
        last_url = self.orchestrator.last_url
        last_count: Optional[int] = None
        while True:
            try:
                current = await self.orchestrator.page.url()
                count = await self._control_count()
            except Exception as e:
                self.logger.warning(f"Could not read page state: {e}")
                await asyncio.sleep(self.interval)
                continue

            if last_url is None:
                last_url = current
            if last_count is None:
                last_count = count

            if current != last_url:
                self.logger.info(f"Page changed to {current}, re-running autofill")
                last_url = current
                await self._rerun()
                last_count = await self._safe_control_count(last_count)
            elif count > last_count:
                self.logger.info(f"{count - last_count} new controls appeared, re-running autofill")
                await self._rerun()
                last_count = await self._safe_control_count(count)
            else:
                last_count = count

            await asyncio.sleep(self.interval)

    async def _control_count(self) -> int:
        if not self.watch_new_fields:
            return 0
        return len(await self.orchestrator.page.controls())

    async def _safe_control_count(self, fallback: int) -> int:
        try:
            return await self._control_count()
        except Exception as e:
            self.logger.debug(f"Could not count controls after re-run: {e}")
            return fallback

    async def _rerun(self):
        await asyncio.sleep(self.settle_delay)
        try:
            profile = self.profile_provider()
            if inspect.isawaitable(profile):
                profile = await profile
        except Exception as e:
            self.logger.error(f"Profile provider failed: {e}", exc_info=True)
            return
        if profile is None:
            self.logger.info("No profile available, skipping re-run")
            return
        self.summaries.append(await self.orchestrator.run(profile))
