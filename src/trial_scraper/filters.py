"""Filtering logic for trial records."""
import re
from typing import Iterable, List, Optional

from .model import TrialRecord

RECRUITING_PATTERN = re.compile(r"Recruiting|Not yet recruiting", re.IGNORECASE)


def is_recruiting(status: Optional[str]) -> bool:
    """Check if a recruitment status means the trial is open for enrollment.

    Args:
        status: Recruitment status text

    Returns:
        True for exactly "Recruiting" or "Not yet recruiting", ignoring case
        and surrounding whitespace
    """
    if not status:
        return False
    return RECRUITING_PATTERN.fullmatch(status.strip()) is not None


def filter_recruiting_trials(trials: Iterable[TrialRecord]) -> List[TrialRecord]:
    """Keep trials open for enrollment, preserving order."""
    return [trial for trial in trials if is_recruiting(trial.recruitment_status)]
