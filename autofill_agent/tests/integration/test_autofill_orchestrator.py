import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from autofill_agent.core.models import FillStatus, Profile
from autofill_agent.core.orchestrator import RUN_FIELD, AutofillOrchestrator
from autofill_agent.tests.fakes import FakeControl, FakePage

GENERIC_URL = "https://careers.example.com/apply"


def _application_controls():
    return [
        FakeControl("0:0", label="First Name *", name="first_name"),
        FakeControl("0:1", label="Last Name *", name="last_name"),
        FakeControl("0:2", type="email", label="Email Address", name="email"),
        FakeControl("0:3", type="tel", label="Phone Number", name="phone"),
        FakeControl("0:4", tag="select", type="select-one",
                    label="Are you legally authorized to work in the United States?",
                    options=[("", "Select"), ("yes", "Yes"), ("no", "No")]),
        FakeControl("0:5", label="Favorite color", name="color"),
        FakeControl("0:6", label="Website", name="site"),
        FakeControl("0:7", type="file", label="Resume/CV", name="resume", accept=".pdf,.doc"),
        FakeControl("0:8", label="Middle Name", name="middle_name", visible=False),
    ]


class BlockingControl(FakeControl):
    """Holds focus() until released so a run can be observed in progress."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.release = asyncio.Event()

    async def focus(self):
        await self.release.wait()
        await super().focus()


@pytest.mark.asyncio
async def test_end_to_end_generic_form(sample_profile, fast_timings):
    controls = _application_controls()
    orchestrator = AutofillOrchestrator(FakePage(GENERIC_URL, controls), timings=fast_timings)

    summary = await orchestrator.run(sample_profile)

    assert summary.platform == "Generic"
    assert not summary.skipped
    statuses = {o.field: o.status for o in summary.outcomes}
    assert statuses["First Name"] is FillStatus.FILLED
    assert statuses["Favorite color"] is FillStatus.SKIPPED_NO_MATCH
    assert statuses["Website"] is FillStatus.SKIPPED_NO_VALUE
    assert summary.filled_count == 6
    assert summary.outcomes[0].field_type == "resume"

    first, last, email, phone, authorized, color, website, resume, middle = controls
    assert first.value == "Jane" and last.value == "Doe"
    assert email.value == "jane.doe@example.com"
    assert phone.value == "(555) 123-4567"
    assert authorized.value == "yes"
    assert color.writes == [] and website.writes == []
    assert resume.files[0][0] == "jane_doe.pdf"
    assert middle.focus_count == 0
    assert not orchestrator.busy


@pytest.mark.asyncio
async def test_full_name_only_profile_fills_split_names(fast_timings):
    profile = Profile.from_dict({"fullName": "Jane Doe", "email": "jane@x.com", "workAuthorization": True})
    controls = [
        FakeControl("0:0", label="First Name"),
        FakeControl("0:1", label="Last Name"),
        FakeControl("0:2", type="email", label="Email"),
        FakeControl("0:3", tag="select", type="select-one", label="Are you authorized to work?",
                    options=[("Yes", "Yes"), ("No", "No")]),
    ]

    summary = await AutofillOrchestrator(FakePage(GENERIC_URL, controls), timings=fast_timings).run(profile)

    assert summary.filled_count == 4
    assert summary.count(FillStatus.FAILED) == 0
    assert [c.value for c in controls] == ["Jane", "Doe", "jane@x.com", "Yes"]


@pytest.mark.asyncio
async def test_radio_groups_and_rich_text_are_filled(sample_profile, fast_timings):
    question = "Will you now or in the future require sponsorship?"
    sponsor_yes = FakeControl("0:1", type="radio", name="sponsor", value="yes", label="Yes", group_label=question)
    sponsor_no = FakeControl("0:2", type="radio", name="sponsor", value="no", label="No", group_label=question)
    cover = FakeControl("0:3", tag="div", type="", label="Cover Letter", contenteditable=True)
    controls = [FakeControl("0:0", label="First Name", name="first_name"), sponsor_yes, sponsor_no, cover]
    sample_profile.cover_letter = "I would love to join Acme."

    summary = await AutofillOrchestrator(FakePage(GENERIC_URL, controls), timings=fast_timings).run(sample_profile)

    statuses = {o.field: o.status for o in summary.outcomes}
    assert statuses[question] is FillStatus.FILLED
    assert statuses["Cover Letter"] is FillStatus.FILLED
    assert sponsor_no.checked is True and sponsor_yes.checked is None
    assert cover.value == "I would love to join Acme."


@pytest.mark.asyncio
async def test_fields_that_render_late_are_collected(sample_profile, fast_timings):
    page = FakePage(GENERIC_URL)
    page.controls = AsyncMock(side_effect=[[], [FakeControl("0:0", label="First Name", name="first_name")]])

    summary = await AutofillOrchestrator(page, timings=fast_timings).run(sample_profile)

    assert summary.filled_count == 1
    assert page.controls.await_count == 2


@pytest.mark.asyncio
async def test_second_run_skips_filled_controls(sample_profile, fast_timings):
    controls = _application_controls()
    page = FakePage(GENERIC_URL, controls)

    await AutofillOrchestrator(page, timings=fast_timings).run(sample_profile)
    summary = await AutofillOrchestrator(page, timings=fast_timings).run(sample_profile)

    assert summary.filled_count == 0
    assert summary.count(FillStatus.SKIPPED_ALREADY_FILLED) == 6
    assert controls[0].writes == ["Jane"]
    assert len(controls[7].files) == 1


@pytest.mark.asyncio
async def test_concurrent_run_is_rejected(sample_profile, fast_timings):
    control = BlockingControl("0:0", label="First Name", name="first_name")
    orchestrator = AutofillOrchestrator(FakePage(GENERIC_URL, [control]), timings=fast_timings)

    first = asyncio.create_task(orchestrator.run(sample_profile))
    while not orchestrator.busy:
        await asyncio.sleep(0)

    second = await orchestrator.run(sample_profile)
    assert second.skipped
    assert second.outcomes == []

    control.release.set()
    result = await first
    assert not result.skipped
    assert result.filled_count == 1
    assert not orchestrator.busy


@pytest.mark.asyncio
async def test_unexpected_error_is_reported_as_run_outcome(sample_profile, fast_timings):
    page = FakePage(GENERIC_URL)
    page.controls = AsyncMock(side_effect=RuntimeError("frame crashed"))
    orchestrator = AutofillOrchestrator(page, timings=fast_timings)

    summary = await orchestrator.run(sample_profile)

    assert len(summary.outcomes) == 1
    assert summary.outcomes[0].field == RUN_FIELD
    assert summary.outcomes[0].status is FillStatus.FAILED
    assert "frame crashed" in summary.outcomes[0].reason
    assert not orchestrator.busy


@pytest.mark.asyncio
async def test_field_failure_does_not_stop_run(sample_profile, fast_timings):
    controls = [
        FakeControl("0:0", label="First Name", name="first_name", fail_on={"write"}),
        FakeControl("0:1", label="Last Name", name="last_name"),
    ]
    summary = await AutofillOrchestrator(FakePage(GENERIC_URL, controls), timings=fast_timings).run(sample_profile)

    assert [o.status for o in summary.outcomes] == [FillStatus.FAILED, FillStatus.FILLED]
    assert controls[1].value == "Doe"


@pytest.mark.asyncio
async def test_workday_uploads_first_and_uses_its_events(sample_profile, fast_timings):
    controls = [
        FakeControl("0:0", label="First Name", name="first_name"),
        FakeControl("0:1", type="file", label="Upload resume", name="resume", accept=".pdf"),
    ]
    page = FakePage("https://acme.wd5.myworkdayjobs.com/en-US/careers/apply", controls)

    summary = await AutofillOrchestrator(page, timings=fast_timings).run(sample_profile)

    assert summary.platform == "Workday"
    assert [o.field_type for o in summary.outcomes] == ["resume", "firstName"]
    assert controls[0].event_types == ["keydown", "input", "keyup", "change", "blur", "focusout"]


@pytest.mark.asyncio
async def test_greenhouse_events_are_flushed_after_fields(sample_profile, fast_timings):
    controls = [
        FakeControl("0:0", label="First Name", name="first_name"),
        FakeControl("0:1", label="Last Name", name="last_name"),
    ]
    page = FakePage("https://boards.greenhouse.io/acme/jobs/42", controls)

    summary = await AutofillOrchestrator(page, timings=fast_timings).run(sample_profile)

    assert summary.platform == "Greenhouse"
    assert summary.filled_count == 2
    assert all(c.event_types == ["input", "change", "blur"] and c.marked for c in controls)


@pytest.mark.asyncio
async def test_missing_resume_is_reported(fast_timings):
    controls = [FakeControl("0:0", type="file", label="Resume", name="resume")]
    summary = await AutofillOrchestrator(FakePage(GENERIC_URL, controls), timings=fast_timings).run(
        Profile(first_name="Jane"))

    assert summary.outcomes[0].status is FillStatus.SKIPPED_NO_VALUE
    assert controls[0].files == []


@pytest.mark.asyncio
async def test_diagnostics_track_stages(sample_profile, fast_timings):
    diagnostics = MagicMock()
    diagnostics.track_stage.return_value.__enter__ = MagicMock(return_value=None)
    diagnostics.track_stage.return_value.__exit__ = MagicMock(return_value=False)
    controls = [FakeControl("0:0", label="First Name", name="first_name")]

    await AutofillOrchestrator(FakePage(GENERIC_URL, controls), timings=fast_timings,
                               diagnostics_manager=diagnostics).run(sample_profile)

    stages = [call.args[0] for call in diagnostics.track_stage.call_args_list]
    assert stages == ["detect_platform", "collect_fields", "fill_fields"]
    diagnostics.start_action.assert_called_once_with("fill", {"field": "First Name"})
    diagnostics.end_action.assert_called_once_with(True, None)


@pytest.mark.asyncio
async def test_watcher_reruns_after_page_change(sample_profile, fast_timings):
    page = FakePage(GENERIC_URL, [FakeControl("0:0", label="First Name", name="first_name")])
    orchestrator = AutofillOrchestrator(page, timings=fast_timings)
    watcher = orchestrator.watch_navigation(lambda: sample_profile, interval=0.01, settle_delay=0)

    await asyncio.sleep(0.05)
    assert watcher.summaries == []

    step_two = FakeControl("1:0", label="Last Name", name="last_name")
    page.control_list = [step_two]
    page.location = GENERIC_URL + "/step-2"
    for _ in range(200):
        if watcher.summaries:
            break
        await asyncio.sleep(0.01)

    assert len(watcher.summaries) == 1
    assert step_two.value == "Doe"

    await watcher.stop()
    assert not watcher.running
    await watcher.stop()

    reads = page.url_reads
    await asyncio.sleep(0.05)
    assert page.url_reads == reads


@pytest.mark.asyncio
async def test_watcher_accepts_async_provider_and_skips_empty_profile(fast_timings):
    page = FakePage(GENERIC_URL, [FakeControl("0:0", label="First Name", name="first_name")])
    orchestrator = AutofillOrchestrator(page, timings=fast_timings)
    calls = []

    async def provider():
        calls.append(1)
        return None

    async with orchestrator.watch_navigation(provider, interval=0.01, settle_delay=0) as watcher:
        page.location = GENERIC_URL + "/next"
        for _ in range(200):
            if calls:
                break
            await asyncio.sleep(0.01)

    assert calls
    assert watcher.summaries == []
    assert not watcher.running
