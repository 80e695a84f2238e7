"""Build trial records from study page markdown."""
import re
from typing import List

from .model import EligibilityInfo, Location, TrialRecord
from .text_clean import (
    BULLET_ONLY_PATTERN,
    BULLET_PATTERN,
    EMPHASIS,
    LABEL_END,
    LABEL_SEPARATOR,
    LABEL_START,
    drop_label_lines,
    extract_line_value,
    extract_nct_id,
    extract_section,
    extract_title,
    first_line_value,
    first_section,
    normalize_text,
)

CRITERIA_COLON = EMPHASIS + r"[ \t]*:" + EMPHASIS
INCLUSION_PATTERN = re.compile(LABEL_START + r"Inclusion Criteria" + CRITERIA_COLON, re.IGNORECASE)
EXCLUSION_PATTERN = re.compile(LABEL_START + r"Exclusion Criteria" + CRITERIA_COLON, re.IGNORECASE)

# Lines that open another part of the eligibility section
SUBLABEL_BOUNDARY_PATTERN = re.compile(
    r"^[ \t]*(?:[-*•][ \t]+)?" + EMPHASIS + r"(?:"
    r"(?:Inclusion|Exclusion) Criteria" + LABEL_END
    + r"|(?:Sex|Gender|Minimum Age|Maximum Age)" + LABEL_SEPARATOR
    + r")",
    re.IGNORECASE | re.MULTILINE,
)

EMPHASIS_ONLY_LINE_PATTERN = re.compile(r"^[ \t]*(?:\*\*|__)[ \t]*$", re.MULTILINE)

CONTACT_LINE_PATTERN = re.compile(r"^(?:Contact|Phone|Email|Site)\b", re.IGNORECASE)

# Page-level facts that may sit inside a list section
FACT_LABELS = ("Recruitment Status", "Overall Status", "Sponsor", "Lead Sponsor")


def _extract_criteria(section: str, label_pattern: re.Pattern) -> str:
    match = label_pattern.search(section)
    if not match:
        return ""
    rest = section[match.end():]
    boundary = SUBLABEL_BOUNDARY_PATTERN.search(rest)
    criteria = rest[:boundary.start()] if boundary else rest
    return EMPHASIS_ONLY_LINE_PATTERN.sub("", criteria)


def parse_eligibility(markdown: str) -> EligibilityInfo:
    """Parse inclusion/exclusion criteria, age bounds and sex from the eligibility section.

    Args:
        markdown: Full page markdown

    Returns:
        EligibilityInfo with empty strings for anything not found
    """
    eligibility = extract_section(markdown, "Eligibility Criteria")
    if not eligibility:
        return EligibilityInfo()

    inclusion = _extract_criteria(eligibility, INCLUSION_PATTERN)
    exclusion = _extract_criteria(eligibility, EXCLUSION_PATTERN)

    sex = first_line_value(eligibility, "Sex", "Gender")

    age_lines = []
    min_age = extract_line_value(eligibility, "Minimum Age")
    if min_age:
        age_lines.append(f"Minimum Age: {min_age}")
    max_age = extract_line_value(eligibility, "Maximum Age")
    if max_age:
        age_lines.append(f"Maximum Age: {max_age}")

    return EligibilityInfo(
        inclusion=normalize_text(inclusion),
        exclusion=normalize_text(exclusion),
        age=normalize_text("\n".join(age_lines)),
        sex=normalize_text(sex),
    )


def parse_location_line(line: str) -> Location:
    """Split a ``City, State, Country`` line.

    One part is taken as the country, two as city and state, and anything
    past the second comma is kept together as the country. Sites without a
    state/region are therefore misassigned.
    """
    parts = [part.strip() for part in line.split(",")]
    if len(parts) == 1:
        return Location(country=parts[0])
    if len(parts) == 2:
        return Location(city=parts[0], state=parts[1])
    return Location(city=parts[0], state=parts[1], country=", ".join(parts[2:]))


def parse_locations(markdown: str) -> List[Location]:
    """Parse study sites from the Locations (or Contacts and Locations) section."""
    locations_text = first_section(markdown, "Locations", "Contacts and Locations")
    if not locations_text:
        return []

    locations = []
    for line in locations_text.split("\n"):
        line = line.strip()
        if not line or BULLET_ONLY_PATTERN.match(line):
            continue
        cleaned = BULLET_PATTERN.sub("", line)
        # Contact details belong to a site, they are not a site
        if CONTACT_LINE_PATTERN.match(line) or CONTACT_LINE_PATTERN.match(cleaned):
            continue
        locations.append(parse_location_line(cleaned))
    return locations


def build_trial_record(markdown: str, source_url: str) -> TrialRecord:
    """Assemble one complete trial record from a study page.

    Args:
        markdown: Page markdown
        source_url: Address the page was fetched from

    Returns:
        TrialRecord with every field populated or defaulted
    """
    eligibility = parse_eligibility(markdown)

    return TrialRecord(
        nct_id=extract_nct_id(markdown),
        title=extract_title(markdown),
        condition=normalize_text(
            drop_label_lines(first_section(markdown, "Conditions", "Condition"), FACT_LABELS)
        ),
        recruitment_status=normalize_text(
            first_line_value(markdown, "Recruitment Status", "Overall Status")
        ),
        inclusion_criteria=eligibility.inclusion,
        exclusion_criteria=eligibility.exclusion,
        age_requirements=eligibility.age,
        sex=eligibility.sex,
        locations=parse_locations(markdown),
        sponsor=normalize_text(first_line_value(markdown, "Sponsor", "Lead Sponsor")),
        contact_info=normalize_text(first_section(markdown, "Contacts and Locations", "Contacts")),
        source_url=source_url,
    )
