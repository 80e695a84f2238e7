"""Text normalization and heading/label extraction for trial page markdown.

Each rule is a pure function over text so that a change in the page format
can be patched one rule at a time.
"""

import re
from typing import Optional

# Leading bullet markers ("- ", "* ", "• "), possibly repeated
BULLET_PATTERN = re.compile(r"^(?:[-*•]\s+)+")
BULLET_ONLY_PATTERN = re.compile(r"^[-*•]\s*$")

# Markdown headings of rank 1-4 on their own line
HEADING_PREFIX = r"^[ \t]*#{1,4}[ \t]+"
NEXT_HEADING_PATTERN = re.compile(HEADING_PREFIX, re.MULTILINE)
FIRST_HEADING_PATTERN = re.compile(HEADING_PREFIX + r"(.+)$", re.MULTILINE)

NCT_ID_PATTERN = re.compile(r"NCT\d{8}")

# Bold or underscore emphasis around a label
EMPHASIS = r"(?:\*\*|__)?"
# Word edges that still allow "_" emphasis next to a label
LABEL_START = r"(?<![A-Za-z0-9])"
LABEL_END = r"(?![A-Za-z0-9])"
# ":" or a spaced " - ", so hyphenated words are not read as labels
LABEL_SEPARATOR = EMPHASIS + r"(?:[ \t]*:|[ \t]+-)" + EMPHASIS


def normalize_text(text: Optional[str]) -> str:
    """
    Collapse multi-line, bulleted text into one semicolon-joined line.

    Blank lines are dropped, leading bullet markers stripped and whitespace
    runs collapsed. Normalizing the output again returns it unchanged.
    """
    if not text:
        return ""

    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        lines.append(BULLET_PATTERN.sub("", line))

    return re.sub(r"\s+", " ", "; ".join(lines)).strip()


def extract_section(markdown: str, heading: str) -> str:
    """
    Return the body under ``heading`` up to the next heading of rank 1-4.

    Matching is case-insensitive and the heading must be the whole line.
    Returns an empty string when the heading is absent.
    """
    if not markdown:
        return ""

    heading_pattern = re.compile(
        HEADING_PREFIX + re.escape(heading) + r"[ \t\r]*$",
        re.IGNORECASE | re.MULTILINE,
    )
    match = heading_pattern.search(markdown)
    if not match:
        return ""

    rest = markdown[match.end():]
    next_heading = NEXT_HEADING_PATTERN.search(rest)
    section = rest[:next_heading.start()] if next_heading else rest
    return section.strip()


def extract_line_value(text: str, label: str) -> str:
    """Find ``Label: value`` or ``Label - value`` anywhere in text and return the value."""
    if not text:
        return ""

    pattern = re.compile(
        LABEL_START + re.escape(label) + LABEL_SEPARATOR + r"[ \t]*(.+)",
        re.IGNORECASE,
    )
    match = pattern.search(text)
    return match.group(1).strip() if match else ""


def extract_nct_id(text: str) -> str:
    match = NCT_ID_PATTERN.search(text or "")
    return match.group(0) if match else ""


def extract_title(markdown: str) -> str:
    match = FIRST_HEADING_PATTERN.search(markdown or "")
    return match.group(1).strip() if match else ""


def first_section(markdown: str, *headings: str) -> str:
    """Return the first non-empty section among ``headings``, in priority order."""
    for heading in headings:
        section = extract_section(markdown, heading)
        if section:
            return section
    return ""


def first_line_value(text: str, *labels: str) -> str:
    """Return the first non-empty label value among ``labels``, in priority order."""
    for label in labels:
        value = extract_line_value(text, label)
        if value:
            return value
    return ""


def drop_label_lines(text: str, labels) -> str:
    """Remove lines that are ``Label: value`` facts for any of ``labels``."""
    if not text:
        return ""

    pattern = re.compile(
        r"^[ \t]*" + EMPHASIS + r"(?:" + "|".join(re.escape(label) for label in labels) + r")" + LABEL_SEPARATOR,
        re.IGNORECASE,
    )
    kept = [line for line in text.split("\n") if not pattern.match(line)]
    return "\n".join(kept).strip()
