import asyncio
import logging
from unittest.mock import MagicMock, PropertyMock

import pytest

from autofill_agent.core.orchestrator import AutofillOrchestrator, PageChangeWatcher
from autofill_agent.tests.fakes import FakeControl, FakePage

START_URL = "https://careers.example.com/apply"


class UnreadableUrlPage(FakePage):
    """Fails a number of url() reads once failures are armed."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.failures = 0

    async def url(self):
        if self.failures:
            self.failures -= 1
            raise RuntimeError("execution context was destroyed")
        return await super().url()


async def _wait_for(predicate, attempts=200):
    for _ in range(attempts):
        if predicate():
            return True
        await asyncio.sleep(0.01)
    return predicate()


@pytest.mark.asyncio
async def test_first_read_failure_does_not_stop_watching(sample_profile, fast_timings):
    page = UnreadableUrlPage(START_URL, [FakeControl("0:0", label="First Name", name="first_name")])
    orchestrator = AutofillOrchestrator(page, timings=fast_timings)
    await orchestrator.run(sample_profile)
    assert orchestrator.last_url == START_URL

    page.failures = 1
    page.location = START_URL + "/step-2"
    step_two = FakeControl("1:0", label="Last Name", name="last_name")
    page.control_list = [step_two]

    async with orchestrator.watch_navigation(lambda: sample_profile, interval=0.01, settle_delay=0) as watcher:
        assert await _wait_for(lambda: watcher.summaries)
        assert watcher.running

    assert page.failures == 0
    assert step_two.value == "Doe"
    assert len(watcher.summaries) == 1


@pytest.mark.asyncio
async def test_new_controls_trigger_a_rerun(sample_profile, fast_timings):
    first = FakeControl("0:0", label="First Name", name="first_name")
    page = FakePage(START_URL, [first])
    orchestrator = AutofillOrchestrator(page, timings=fast_timings)
    await orchestrator.run(sample_profile)

    async with orchestrator.watch_navigation(lambda: sample_profile, interval=0.01, settle_delay=0) as watcher:
        await asyncio.sleep(0.05)
        assert watcher.summaries == []

        late = FakeControl("0:1", label="Last Name", name="last_name")
        page.control_list.append(late)
        assert await _wait_for(lambda: watcher.summaries)

    assert late.value == "Doe"
    assert first.writes == ["Jane"]


@pytest.mark.asyncio
async def test_new_controls_ignored_when_disabled(sample_profile, fast_timings):
    page = FakePage(START_URL, [FakeControl("0:0", label="First Name", name="first_name")])
    orchestrator = AutofillOrchestrator(page, timings=fast_timings)

    watcher = orchestrator.watch_navigation(lambda: sample_profile, interval=0.01, settle_delay=0,
                                            watch_new_fields=False)
    await asyncio.sleep(0.03)
    page.control_list.append(FakeControl("0:1", label="Last Name", name="last_name"))
    await asyncio.sleep(0.05)
    await watcher.stop()

    assert watcher.summaries == []


@pytest.mark.asyncio
async def test_stop_reports_a_crashed_watcher(caplog):
    orchestrator = MagicMock()
    type(orchestrator).last_url = PropertyMock(side_effect=RuntimeError("orchestrator gone"))
    watcher = PageChangeWatcher(orchestrator, lambda: None, interval=0.01, settle_delay=0)

    watcher.start()
    assert await _wait_for(lambda: not watcher.running)

    with caplog.at_level(logging.ERROR, logger="autofill_agent.core.orchestrator"):
        await watcher.stop()

    assert "orchestrator gone" in caplog.text
    await watcher.stop()
