import pytest

from autofill_agent.core.platform_detector import (
    DEFAULT_PLATFORMS,
    GENERIC_PLATFORM,
    MULTI_STEP,
    Platform,
    PlatformDetector,
)
from autofill_agent.tests.fakes import FakePage


class FailingQueryPage(FakePage):
    async def query_exists(self, selector: str) -> bool:
        if selector == "[data-automation-id]":
            raise RuntimeError("query failed")
        return await super().query_exists(selector)


@pytest.mark.asyncio
async def test_hostname_detection():
    detector = PlatformDetector(FakePage("https://acme.wd5.myworkdayjobs.com/en-US/careers/job/123"))
    profile = await detector.detect()
    assert profile.platform is Platform.WORKDAY
    assert profile.confidence_threshold == 0.7


@pytest.mark.asyncio
async def test_url_pattern_when_hostname_unknown():
    detector = PlatformDetector(FakePage("https://careers.example.com/greenhouse/apply"))
    assert (await detector.detect()).platform is Platform.GREENHOUSE


@pytest.mark.asyncio
async def test_hostname_precedes_dom_signatures():
    page = FakePage("https://jobs.lever.co/acme/123/apply", selectors={"[data-automation-id]"})
    assert (await PlatformDetector(page).detect()).platform is Platform.LEVER


@pytest.mark.asyncio
async def test_dom_signature_detection():
    page = FakePage("https://careers.example.com/apply", selectors={"#application_form"})
    assert (await PlatformDetector(page).detect()).platform is Platform.GREENHOUSE


@pytest.mark.asyncio
async def test_failed_signature_query_is_skipped():
    page = FailingQueryPage("https://careers.example.com/apply", selectors={".iCIMS_MainWrapper"})
    assert (await PlatformDetector(page).detect()).platform is Platform.ICIMS


@pytest.mark.asyncio
async def test_generic_fallback():
    detector = PlatformDetector(FakePage("https://careers.example.com/apply"))
    profile = await detector.detect()
    assert profile is GENERIC_PLATFORM
    assert profile.is_generic
    assert profile.event_strategy.trigger_on_each


@pytest.mark.asyncio
async def test_detection_is_memoized_until_reset():
    page = FakePage("https://boards.greenhouse.io/acme/jobs/1")
    detector = PlatformDetector(page)
    await detector.detect()
    await detector.detect()
    assert page.url_reads == 1

    detector.reset()
    page.location = "https://careers.example.com/apply"
    assert (await detector.detect()).is_generic
    assert page.url_reads == 2


@pytest.mark.asyncio
async def test_accessors_follow_detected_platform():
    detector = PlatformDetector(FakePage("https://acme.wd1.myworkdayjobs.com/apply"))
    assert detector.delay_ms() == 0

    await detector.detect()
    assert detector.delay_ms() == 150
    assert detector.requires_delays()
    assert detector.event_strategy().events[0] == "keydown"
    assert "input-firstName" in detector.field_pattern_override("firstName")
    assert detector.field_pattern_override("gpa") == ()
    assert detector.has_special_handling("legal_questions")
    assert not detector.has_special_handling("eeo_questions")


@pytest.mark.asyncio
async def test_greenhouse_hostname_without_dom_signature():
    page = FakePage("https://job-boards.greenhouse.io/acme/jobs/4242")
    profile = await PlatformDetector(page).detect()

    assert profile.platform is Platform.GREENHOUSE
    assert not profile.event_strategy.trigger_on_each


@pytest.mark.parametrize("platform,dynamic", [
    (Platform.WORKDAY, True),
    (Platform.GREENHOUSE, False),
    (Platform.LEVER, False),
    (Platform.ASHBY, True),
    (Platform.TALEO, True),
    (Platform.ICIMS, True),
    (Platform.SMARTRECRUITERS, False),
])
def test_platform_characteristics(platform, dynamic):
    profile = next(p for p in DEFAULT_PLATFORMS if p.platform is platform)
    assert profile.characteristics.dynamic_forms is dynamic
    assert profile.characteristics.upload_first
    assert {"input", "change", "blur"} <= set(profile.event_strategy.events)


def test_multi_step_platforms_are_flagged():
    flagged = {p.platform for p in DEFAULT_PLATFORMS if MULTI_STEP in p.special_handling}
    assert flagged == {Platform.WORKDAY, Platform.ASHBY, Platform.TALEO, Platform.ICIMS}
    assert GENERIC_PLATFORM.characteristics.upload_first
