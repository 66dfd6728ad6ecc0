"""Detection of the hosting applicant-tracking platform."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple
from urllib.parse import urlparse

from autofill_agent.tools.constants import DEFAULT_CONFIDENCE_THRESHOLD

logger = logging.getLogger(__name__)


class Platform(Enum):
    WORKDAY = "workday"
    GREENHOUSE = "greenhouse"
    LEVER = "lever"
    ASHBY = "ashby"
    TALEO = "taleo"
    ICIMS = "icims"
    SMARTRECRUITERS = "smartrecruiters"
    GENERIC = "generic"


@dataclass(frozen=True)
class PlatformCharacteristics:
    dynamic_forms: bool = False
    requires_delays: bool = False
    delay_ms: int = 0
    upload_first: bool = True


@dataclass(frozen=True)
class EventStrategy:
    """Synthetic events dispatched after a value is assigned."""
    events: Tuple[str, ...] = ("input", "change", "blur")
    trigger_on_each: bool = True
    wait_after_ms: int = 0


@dataclass(frozen=True)
class PlatformProfile:
    platform: Platform
    name: str
    hostnames: Tuple[str, ...] = ()
    url_patterns: Tuple[str, ...] = ()
    dom_signatures: Tuple[str, ...] = ()
    characteristics: PlatformCharacteristics = field(default_factory=PlatformCharacteristics)
    event_strategy: EventStrategy = field(default_factory=EventStrategy)
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    field_patterns: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    special_handling: FrozenSet[str] = frozenset()

    @property
    def is_generic(self) -> bool:
        return self.platform is Platform.GENERIC


# Flag for platforms whose applications span several pages.
MULTI_STEP = "multi_step"

GENERIC_PLATFORM = PlatformProfile(
    platform=Platform.GENERIC,
    name="Generic",
    event_strategy=EventStrategy(("input", "change", "blur"), trigger_on_each=True, wait_after_ms=0),
)

DEFAULT_PLATFORMS: List[PlatformProfile] = [
    PlatformProfile(
        platform=Platform.WORKDAY,
        name="Workday",
        hostnames=("myworkdayjobs.com", "workday.com"),
        url_patterns=(r"workday",),
        dom_signatures=("[data-automation-id]", ".css-workday", '[class*="workday"]'),
        characteristics=PlatformCharacteristics(
            dynamic_forms=True, requires_delays=True, delay_ms=150),
        event_strategy=EventStrategy(
            ("keydown", "input", "keyup", "change", "blur", "focusout"), trigger_on_each=True, wait_after_ms=150),
        confidence_threshold=0.7,
        field_patterns={
            "firstName": ("input-firstName", "legalNameSection.legalName.firstName", "legalNameSection_firstName"),
            "lastName": ("input-lastName", "legalNameSection.legalName.lastName", "legalNameSection_lastName"),
            "email": ("input-email", "email"),
            "phone": ("input-phone", "phone-number"),
            "address": ("addressSection_addressLine1",),
            "city": ("addressSection_city",),
            "zipCode": ("addressSection_postalCode",),
            "state": ("addressSection_countryRegion",),
        },
        special_handling=frozenset({"legal_questions", "government_questions", "i9_questions", MULTI_STEP}),
    ),
    PlatformProfile(
        platform=Platform.GREENHOUSE,
        name="Greenhouse",
        hostnames=("greenhouse.io", "boards.greenhouse.io"),
        url_patterns=(r"greenhouse",),
        dom_signatures=('[data-source="greenhouse"]', ".application-form", "#application_form"),
        characteristics=PlatformCharacteristics(delay_ms=50),
        event_strategy=EventStrategy(("input", "change", "blur"), trigger_on_each=False, wait_after_ms=50),
        field_patterns={
            "firstName": ("first_name", "job_application[first_name]"),
            "lastName": ("last_name", "job_application[last_name]"),
            "email": ("job_application[email]",),
            "phone": ("job_application[phone]",),
            "resume": ("resume", "job_application[resume]"),
        },
        special_handling=frozenset({"eeo_questions", "custom_questions"}),
    ),
    PlatformProfile(
        platform=Platform.LEVER,
        name="Lever",
        hostnames=("lever.co", "jobs.lever.co"),
        url_patterns=(r"lever\.co",),
        dom_signatures=(".application-page", '[data-qa="btn-submit"]', ".lever-application"),
        characteristics=PlatformCharacteristics(delay_ms=50),
        event_strategy=EventStrategy(("input", "change", "blur"), trigger_on_each=False, wait_after_ms=50),
        field_patterns={
            "fullName": ("name",),
            "currentCompany": ("org",),
            "linkedin": ("urls[linkedin]",),
            "github": ("urls[github]",),
            "portfolio": ("urls[portfolio]",),
            "website": ("urls[other]",),
        },
    ),
    PlatformProfile(
        platform=Platform.ASHBY,
        name="Ashby",
        hostnames=("ashbyhq.com", "jobs.ashbyhq.com"),
        url_patterns=(r"ashby",),
        dom_signatures=('[class*="ashby"]', "._applicationForm"),
        characteristics=PlatformCharacteristics(
            dynamic_forms=True, requires_delays=True, delay_ms=100),
        event_strategy=EventStrategy(
            ("keydown", "input", "keyup", "change", "blur"), trigger_on_each=True, wait_after_ms=100),
        field_patterns={
            "fullName": ("_systemfield_name",),
            "email": ("_systemfield_email",),
            "resume": ("_systemfield_resume",),
        },
        special_handling=frozenset({"custom_questions", "rich_text_fields", MULTI_STEP}),
    ),
    PlatformProfile(
        platform=Platform.TALEO,
        name="Oracle Taleo",
        hostnames=("taleo.net",),
        url_patterns=(r"taleo",),
        dom_signatures=('[id*="taleo"]', ".taleo-form", "#requisitionDescriptionInterface"),
        characteristics=PlatformCharacteristics(
            dynamic_forms=True, requires_delays=True, delay_ms=200),
        event_strategy=EventStrategy(
            ("keydown", "input", "keyup", "change", "blur", "focusout"), trigger_on_each=True, wait_after_ms=200),
        special_handling=frozenset({MULTI_STEP}),
    ),
    PlatformProfile(
        platform=Platform.ICIMS,
        name="iCIMS",
        hostnames=("icims.com",),
        url_patterns=(r"icims",),
        dom_signatures=(".iCIMS_MainWrapper", '[class*="icims"]'),
        characteristics=PlatformCharacteristics(dynamic_forms=True, requires_delays=True, delay_ms=150),
        event_strategy=EventStrategy(("input", "change", "blur"), trigger_on_each=True, wait_after_ms=150),
        special_handling=frozenset({MULTI_STEP}),
    ),
    PlatformProfile(
        platform=Platform.SMARTRECRUITERS,
        name="SmartRecruiters",
        hostnames=("smartrecruiters.com",),
        url_patterns=(r"smartrecruiters",),
        dom_signatures=('[class*="smartrecruiters"]', "oc-apply-form"),
        characteristics=PlatformCharacteristics(delay_ms=50),
        event_strategy=EventStrategy(("input", "change", "blur"), trigger_on_each=True, wait_after_ms=50),
    ),
]


class PlatformDetector:
    """Detects which platform hosts the current page and memoizes the answer."""

    def __init__(self, page, catalog: Optional[List[PlatformProfile]] = None,
                 generic: Optional[PlatformProfile] = None):
        """
        Initialize the detector.

        Args:
            page: PageAdapter for the current document
            catalog: Platform profiles in precedence order
            generic: Profile returned when nothing matches
        """
        self.page = page
        self.catalog = catalog if catalog is not None else list(DEFAULT_PLATFORMS)
        self.generic = generic or GENERIC_PLATFORM
        self.logger = logging.getLogger(__name__)
        self.last_url: Optional[str] = None
        self._detected: Optional[PlatformProfile] = None

    async def detect(self) -> PlatformProfile:
        """Return the platform profile for the current page."""
        if self._detected is not None:
            return self._detected

        url = await self.page.url() or ""
        self.last_url = url
        host = (urlparse(url).hostname or "").lower()

        detected = self._match_hostname(host) or self._match_url(url) or await self._match_dom()
        if detected is None:
            self.logger.info(f"No known platform for {url}, using generic profile")
            detected = self.generic
        else:
            self.logger.info(f"Detected platform: {detected.name}")

        self._detected = detected
        return detected

    def _match_hostname(self, host: str) -> Optional[PlatformProfile]:
        if not host:
            return None
        for profile in self.catalog:
            if any(h in host for h in profile.hostnames):
                self.logger.debug(f"Hostname {host} matched {profile.name}")
                return profile
        return None

    def _match_url(self, url: str) -> Optional[PlatformProfile]:
        for profile in self.catalog:
            if any(re.search(p, url, re.IGNORECASE) for p in profile.url_patterns):
                self.logger.debug(f"URL {url} matched {profile.name}")
                return profile
        return None

    async def _match_dom(self) -> Optional[PlatformProfile]:
        for profile in self.catalog:
            for signature in profile.dom_signatures:
                try:
                    if await self.page.query_exists(signature):
                        self.logger.debug(f"DOM signature '{signature}' matched {profile.name}")
                        return profile
                except Exception as e:
                    self.logger.debug(f"Signature query '{signature}' failed: {e}")
        return None

    def _current(self) -> PlatformProfile:
        return self._detected or self.generic

    def delay_ms(self) -> int:
        return self._current().characteristics.delay_ms

    def requires_delays(self) -> bool:
        return self._current().characteristics.requires_delays

    def event_strategy(self) -> EventStrategy:
        return self._current().event_strategy

    def field_pattern_override(self, field_type_id: str) -> Tuple[str, ...]:
        return self._current().field_patterns.get(field_type_id, ())

    def has_special_handling(self, flag: str) -> bool:
        return flag in self._current().special_handling

    def reset(self):
        """Forget the memoized platform so the next detect() re-inspects the page."""
        self._detected = None
