from datetime import date, timedelta

import pytest

from autofill_agent.core.models import Education, Experience, FieldDescriptor, Profile
from autofill_agent.tools.data_formatter import DataFormatter
from autofill_agent.tools.value_resolver import ValueResolver, split_name


@pytest.fixture
def resolver():
    return ValueResolver()


def _input(input_type="text"):
    return FieldDescriptor(control=None, kind="input", input_type=input_type)


def test_phone_formatting(resolver):
    profile = Profile(phone="555.123.4567")
    assert resolver.resolve("phone", profile, _input("tel")) == "(555) 123-4567"
    assert resolver.resolve("phone", profile) == "(555) 123-4567"


def test_international_phone_left_unchanged(resolver):
    profile = Profile(phone="+44 20 7946 0958")
    assert resolver.resolve("phone", profile, _input("tel")) == "+44 20 7946 0958"


def test_name_fallbacks(resolver):
    profile = Profile(full_name="Jane Q Doe")
    assert resolver.resolve("firstName", profile) == "Jane"
    assert resolver.resolve("lastName", profile) == "Q Doe"
    assert resolver.resolve("fullName", Profile(first_name="Jane", last_name="Doe")) == "Jane Doe"


def test_split_name():
    assert split_name("Cher") == ("Cher", "")
    assert split_name("") == ("", "")


def test_yes_no_intent_uses_option_vocabulary(resolver):
    profile = Profile(work_authorization=True)
    assert resolver.resolve("workAuthorization", profile, options=["Select", "Yes", "No"]) == "Yes"
    assert resolver.resolve("workAuthorization", profile) == "Yes"

    profile = Profile(work_authorization="yes")
    options = ["I am authorized to work", "I am not authorized to work"]
    assert resolver.resolve("workAuthorization", profile, options=options) == "I am authorized to work"


def test_yes_no_defaults(resolver):
    profile = Profile()
    assert resolver.resolve("requireSponsorship", profile, options=["Yes", "No"]) == "No"
    assert resolver.resolve("legalAge", profile) == "Yes"
    assert resolver.resolve("willingToRelocate", profile) is None


def test_free_text_answer_passes_through(resolver):
    profile = Profile(work_authorization="Green card holder")
    assert resolver.resolve("workAuthorization", profile) == "Green card holder"


def test_typed_answer_kept_unless_label_asks_yes_no(resolver):
    profile = Profile(require_sponsorship="No, I hold a green card")
    statement = FieldDescriptor(control=None, kind="textarea", label="Sponsorship details")
    question = FieldDescriptor(control=None, kind="input", label="Do you require sponsorship?")

    assert resolver.resolve("requireSponsorship", profile, statement) == "No, I hold a green card"
    assert resolver.resolve("requireSponsorship", profile, question) == "No"


def test_negative_answer_from_text(resolver):
    profile = Profile(require_sponsorship="No, I do not need sponsorship")
    assert resolver.resolve("requireSponsorship", profile, options=["Yes", "No"]) == "No"


@pytest.mark.parametrize("intent,options,expected", [
    (True, ["True", "False"], "True"),
    (False, ["1", "0"], "0"),
    (False, ["Eligible", "Not eligible"], "Not eligible"),
    (True, ["Eligible", "Ineligible"], "Eligible"),
    (True, [], "Yes"),
    (False, None, "No"),
])
def test_encode_intent(intent, options, expected):
    assert ValueResolver.encode_intent(intent, options) == expected


def test_current_experience_prefers_flagged_entry(resolver, sample_profile):
    assert resolver.resolve("currentCompany", sample_profile) == "Acme Corp"
    assert resolver.resolve("currentTitle", sample_profile) == "Senior Engineer"


def test_current_experience_falls_back_to_first(resolver):
    profile = Profile(experiences=[Experience(company="Initech"), Experience(company="Globex")])
    assert resolver.resolve("currentCompany", profile) == "Initech"


def test_years_of_experience_computed(resolver):
    profile = Profile(experiences=[
        Experience(start_date="2015-01", end_date="2018-01"),
        Experience(start_date="2018-01", end_date="2020-07"),
    ])
    assert resolver.resolve("yearsExperience", profile) == "5"
    assert resolver.resolve("yearsExperience", Profile(years_experience="12")) == "12"


def test_education_values(resolver, sample_profile):
    assert resolver.resolve("university", sample_profile) == "University of Texas"
    assert resolver.resolve("major", sample_profile) == "Computer Science"
    assert resolver.resolve("gpa", Profile(education=[Education(institution="MIT")])) is None


def test_defaults_and_derived_values(resolver, sample_profile):
    expected_start = (date.today() + timedelta(weeks=2)).isoformat()
    assert resolver.resolve("availableStartDate", Profile()) == expected_start
    assert resolver.resolve("phoneType", Profile()) == "Mobile"
    assert resolver.resolve("skills", sample_profile) == "Python, SQL, Docker"
    assert resolver.resolve("location", sample_profile) == "Austin, TX"
    assert resolver.resolve("preferredLocation", sample_profile) == "Austin"


def test_missing_values_resolve_to_none(resolver, sample_profile):
    assert resolver.resolve("country", sample_profile) is None
    assert resolver.resolve("resume", sample_profile) is None
    assert resolver.resolve("website", sample_profile) is None


def test_date_input_formatting(resolver):
    profile = Profile(experiences=[Experience(company="Acme", start_date="2019-07")])
    assert resolver.resolve("employmentStartDate", profile, _input("date")) == "2019-07-01"
    assert resolver.resolve("employmentStartDate", profile, _input("text")) == "2019-07"


def test_formatter_date_passthrough():
    result = DataFormatter().format_date("sometime next spring")
    assert not result.is_valid
    assert result.formatted_value == "sometime next spring"
