"""Test configuration for pytest."""

import base64

import pytest

from autofill_agent.core.action_executor import FillTimings
from autofill_agent.core.models import Education, Experience, Profile, StoredDocument


@pytest.fixture
def fast_timings():
    """Fill timings with every delay removed."""
    return FillTimings(
        focus_delay=0,
        token_input_delay=0,
        token_commit_delay=0,
        post_upload_delay=0,
        upload_retry_delay=0,
        upload_attempts=3,
        max_tokens=10,
        collect_attempts=3,
        collect_retry_delay=0,
        honor_platform_waits=False,
    )


@pytest.fixture
def resume_document():
    return StoredDocument(data=base64.b64encode(b"%PDF-1.4 fake resume").decode("ascii"),
                          name="jane_doe.pdf", media_type="application/pdf")


@pytest.fixture
def sample_profile(resume_document):
    return Profile(
        first_name="Jane",
        last_name="Doe",
        email="jane.doe@example.com",
        phone="555-123-4567",
        city="Austin",
        state="TX",
        linkedin="https://linkedin.com/in/janedoe",
        work_authorization=True,
        require_sponsorship=False,
        experiences=[
            Experience(company="Initech", title="Analyst", start_date="2016-01", end_date="2019-06"),
            Experience(company="Acme Corp", title="Senior Engineer", start_date="2019-07", current=True),
        ],
        education=[Education(institution="University of Texas", degree="Bachelor", major="Computer Science")],
        skills_list=["Python", "SQL", "Docker"],
        resume=resume_document,
    )
