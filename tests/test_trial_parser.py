from __future__ import annotations

import pytest

from trial_scraper.model import Location, TrialRecord
from trial_scraper.trial_parser import (
    build_trial_record,
    parse_eligibility,
    parse_location_line,
    parse_locations,
)

URL = "https://clinicaltrials.gov/study/NCT12345678"


def test_build_trial_record_full_page(recruiting_markdown: str) -> None:
    trial = build_trial_record(recruiting_markdown, URL)

    assert trial.nct_id == "NCT12345678"
    assert trial.title == "Example Trial Title"
    assert trial.condition == "Diabetes; Hypertension"
    assert trial.recruitment_status == "Recruiting"
    assert trial.inclusion_criteria == "Age 18 years or older; HbA1c < 9.0"
    assert trial.exclusion_criteria == "Pregnancy; Severe renal disease"
    assert trial.age_requirements == "Minimum Age: 18 Years; Maximum Age: 65 Years"
    assert trial.sex == "All"
    assert trial.locations == [Location(city="Austin", state="Texas", country="United States")]
    assert trial.sponsor == "Example Sponsor Inc."
    assert trial.contact_info == "Contact: Jane Doe; Phone: 555-555-5555; Email: jane@example.com"
    assert trial.source_url == URL


def test_build_trial_record_minimal_page_keeps_schema(minimal_markdown: str) -> None:
    trial = build_trial_record(minimal_markdown, URL)
    data = trial.model_dump()

    assert set(data) == set(TrialRecord.model_fields)
    assert len(data) == 12
    for key, value in data.items():
        if key == "locations":
            assert value == []
        else:
            assert isinstance(value, str), key
    assert trial.nct_id == "NCT11111111"
    assert trial.recruitment_status == "Not yet recruiting"
    assert trial.condition == ""
    assert trial.inclusion_criteria == ""
    assert trial.sponsor == ""


def test_build_trial_record_without_anything() -> None:
    trial = build_trial_record("", URL)
    assert trial.nct_id == ""
    assert trial.title == ""
    assert trial.locations == []
    assert trial.source_url == URL


def test_build_trial_record_uses_fallback_labels() -> None:
    markdown = (
        "# Fallback Trial\nNCT22222222\n"
        "Overall Status: Recruiting\n"
        "Lead Sponsor: University Hospital\n"
        "## Condition\nMigraine\n"
        "## Contacts\n- Study desk\n"
    )
    trial = build_trial_record(markdown, URL)
    assert trial.recruitment_status == "Recruiting"
    assert trial.sponsor == "University Hospital"
    assert trial.condition == "Migraine"
    assert trial.contact_info == "Study desk"


def test_build_trial_record_prefers_plural_conditions() -> None:
    markdown = "# T\nNCT33333333\n## Condition\nAsthma\n## Conditions\n- Diabetes\n"
    assert build_trial_record(markdown, URL).condition == "Diabetes"


def test_trial_record_is_frozen(recruiting_markdown: str) -> None:
    trial = build_trial_record(recruiting_markdown, URL)
    with pytest.raises(Exception):
        trial.nct_id = "NCT00000000"


def test_parse_eligibility_without_section() -> None:
    eligibility = parse_eligibility("# Title\nSex: Female\n")
    assert eligibility.inclusion == ""
    assert eligibility.exclusion == ""
    assert eligibility.age == ""
    assert eligibility.sex == ""


def test_parse_eligibility_exclusion_before_inclusion() -> None:
    markdown = (
        "## Eligibility Criteria\n"
        "Exclusion Criteria:\n- Smoker\n"
        "Inclusion Criteria:\n- Adult\n"
        "Gender: Male\n"
        "Maximum Age: 80 Years\n"
    )
    eligibility = parse_eligibility(markdown)
    assert eligibility.exclusion == "Smoker"
    assert eligibility.inclusion == "Adult"
    assert eligibility.sex == "Male"
    assert eligibility.age == "Maximum Age: 80 Years"


def test_parse_eligibility_only_inclusion() -> None:
    markdown = "## Eligibility Criteria\nInclusion Criteria:\n* Healthy volunteers\n## Locations\nParis, France\n"
    eligibility = parse_eligibility(markdown)
    assert eligibility.inclusion == "Healthy volunteers"
    assert eligibility.exclusion == ""
    assert eligibility.age == ""


def test_parse_eligibility_sex_takes_priority_over_gender() -> None:
    markdown = "## Eligibility Criteria\nGender: Male\nSex: Female\n"
    assert parse_eligibility(markdown).sex == "Female"


@pytest.mark.parametrize(
    "line,expected",
    [
        ("United States", Location(country="United States")),
        ("Austin, Texas", Location(city="Austin", state="Texas")),
        ("Austin, Texas, United States", Location(city="Austin", state="Texas", country="United States")),
        ("Lyon, Rhone, Auvergne, France", Location(city="Lyon", state="Rhone", country="Auvergne, France")),
        # no state: the country lands in state
        ("Paris, France", Location(city="Paris", state="France")),
    ],
)
def test_parse_location_line(line: str, expected: Location) -> None:
    assert parse_location_line(line) == expected


def test_parse_locations_skips_contact_lines_and_bare_bullets() -> None:
    markdown = (
        "## Locations\n"
        "- Austin, Texas, United States\n"
        "-\n"
        "Contact: Jane Doe\n"
        "- Phone: 555-555-5555\n"
        "email: jane@example.com\n"
        "Site Status: Recruiting\n"
        "* Boston, Massachusetts, United States\n"
    )
    assert parse_locations(markdown) == [
        Location(city="Austin", state="Texas", country="United States"),
        Location(city="Boston", state="Massachusetts", country="United States"),
    ]


def test_parse_locations_falls_back_to_contacts_and_locations() -> None:
    markdown = "## Contacts and Locations\nContact: Study team\n- Toronto, Ontario, Canada\n"
    assert parse_locations(markdown) == [Location(city="Toronto", state="Ontario", country="Canada")]


def test_parse_locations_missing_section() -> None:
    assert parse_locations("# Title\nNCT12345678\n") == []


@pytest.mark.parametrize(
    "markdown",
    [
        "## Eligibility Criteria\n**Inclusion Criteria:**\n- Adult\n\n**Exclusion Criteria:**\n- Pregnancy\n",
        "## Eligibility Criteria\n__Inclusion Criteria__:\n- Adult\n\n__Exclusion Criteria__:\n- Pregnancy\n",
        "## Eligibility Criteria\n- Inclusion Criteria:\n- Adult\n- Exclusion Criteria:\n- Pregnancy\n",
        "## Eligibility Criteria\n* **Inclusion Criteria:**\n  * Adult\n* **Exclusion Criteria:**\n  * Pregnancy\n",
    ],
)
def test_parse_eligibility_decorated_sublabels_keep_criteria_apart(markdown: str) -> None:
    eligibility = parse_eligibility(markdown)
    assert eligibility.inclusion == "Adult"
    assert eligibility.exclusion == "Pregnancy"


def test_parse_eligibility_bold_scalar_labels() -> None:
    markdown = (
        "## Eligibility Criteria\n"
        "Exclusion Criteria:\n- Smoker\n"
        "**Sex:** Female\n"
        "**Minimum Age:** 21 Years\n"
    )
    eligibility = parse_eligibility(markdown)
    assert eligibility.exclusion == "Smoker"
    assert eligibility.sex == "Female"
    assert eligibility.age == "Minimum Age: 21 Years"


def test_parse_eligibility_hyphenated_words_are_criteria() -> None:
    markdown = (
        "## Eligibility Criteria\n"
        "Exclusion Criteria:\n"
        "Gender-affirming hormone therapy\n"
        "Sex-specific cancers\n"
        "Pregnancy\n"
    )
    eligibility = parse_eligibility(markdown)
    assert eligibility.exclusion == "Gender-affirming hormone therapy; Sex-specific cancers; Pregnancy"
    assert eligibility.sex == ""


def test_parse_eligibility_spaced_hyphen_label_ends_criteria() -> None:
    markdown = "## Eligibility Criteria\nExclusion Criteria:\n- Smoker\nGender - Female\n"
    eligibility = parse_eligibility(markdown)
    assert eligibility.exclusion == "Smoker"
    assert eligibility.sex == "Female"
