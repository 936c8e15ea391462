"""
leadflow/services/scoring.py - Lead scoring logic.

Additive point model over what the visitor filled in on the form. The point
values are a business contract with the practices using the dashboard; keep
them exactly as they are.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from leadflow.capture.submission import LeadSubmission
from leadflow.db.models import LeadTemperature

logger = logging.getLogger(__name__)

BASE_POINTS = 40
NAME_POINTS = 5
EMAIL_POINTS = 5
PHONE_POINTS = 10
INSURANCE_YES_POINTS = 15
INSURANCE_NOT_SURE_POINTS = 8
NOTES_POINTS = 5
COMPLETE_PROFILE_BONUS = 10

MAX_SCORE = 100
HOT_THRESHOLD = 80
WARM_THRESHOLD = 50


@dataclass(frozen=True)
class ScoreResult:
    score: int
    temperature: LeadTemperature


def temperature_for(score: int) -> LeadTemperature:
    """Map a (clamped) score onto its heat tier."""
    if score >= HOT_THRESHOLD:
        return LeadTemperature.HOT
    if score >= WARM_THRESHOLD:
        return LeadTemperature.WARM
    return LeadTemperature.COLD


def insurance_points(insurance: Optional[str]) -> int:
    if not insurance or not insurance.strip():
        return 0
    answer = insurance.lower()
    if "yes" in answer:
        return INSURANCE_YES_POINTS
    if "not sure" in answer:
        return INSURANCE_NOT_SURE_POINTS
    return 0


def calculate_score(
    has_name: bool = False,
    has_email: bool = False,
    has_phone: bool = False,
    insurance: Optional[str] = None,
    has_notes: bool = False,
) -> ScoreResult:
    """
    Score a submission from its field-presence signals.

    Every term is non-negative, so the result is in [0, 100] after clamping.
    The completeness bonus stacks on top of the individual name/email/phone
    points.

    Args:
        has_name:   A non-blank name was submitted.
        has_email:  A non-blank email was submitted.
        has_phone:  A non-blank phone number was submitted.
        insurance:  Raw insurance answer ("Yes", "No", "Not sure", ...).
        has_notes:  A non-blank free-text message was submitted.

    Returns:
        ScoreResult with the clamped score and its temperature.
    """
    score = BASE_POINTS

    if has_name:
        score += NAME_POINTS
    if has_email:
        score += EMAIL_POINTS
    if has_phone:
        score += PHONE_POINTS

    score += insurance_points(insurance)

    if has_notes:
        score += NOTES_POINTS

    if has_name and has_email and has_phone:
        score += COMPLETE_PROFILE_BONUS

    score = min(score, MAX_SCORE)
    temperature = temperature_for(score)

    logger.debug("Lead scored %d (%s).", score, temperature.value)
    return ScoreResult(score=score, temperature=temperature)


def score_submission(submission: LeadSubmission) -> ScoreResult:
    """Score a cleaned LeadSubmission (blank fields were already normalized to None)."""
    return calculate_score(
        has_name=submission.has_name,
        has_email=bool(submission.email),
        has_phone=bool(submission.phone),
        insurance=submission.insurance,
        has_notes=bool(submission.notes),
    )
