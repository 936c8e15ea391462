"""
leadflow/services/attribution.py - Lead source attribution from UTM tags.

UTM tagging is inconsistent across ad platforms, so each channel accepts a few
aliases and anything unrecognized falls back to WEBSITE. Source is advisory
metadata; nothing here ever raises.
"""

from typing import Optional

from leadflow.db.models import InsuranceStatus, LeadSource

# Checked in order; first match wins.
_SOURCE_RULES: tuple[tuple[LeadSource, frozenset[str], frozenset[str]], ...] = (
    (LeadSource.FACEBOOK, frozenset({"facebook", "fb"}), frozenset({"facebook"})),
    (LeadSource.INSTAGRAM, frozenset({"instagram", "ig"}), frozenset({"instagram"})),
    (LeadSource.GOOGLE, frozenset({"google", "adwords"}), frozenset({"cpc", "ppc"})),
    (LeadSource.REFERRAL, frozenset({"referral"}), frozenset({"referral"})),
)


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip().lower() or None


def classify_source(utm_source: Optional[str], utm_medium: Optional[str]) -> LeadSource:
    """Map utm_source / utm_medium onto a LeadSource (case-insensitive)."""
    source = _normalize(utm_source)
    medium = _normalize(utm_medium)

    for lead_source, source_aliases, medium_aliases in _SOURCE_RULES:
        if source in source_aliases or medium in medium_aliases:
            return lead_source

    # Organic landing page visit
    return LeadSource.WEBSITE


def build_source_detail(
    utm_source: Optional[str],
    utm_medium: Optional[str],
    utm_campaign: Optional[str],
    landing_page_name: str,
) -> str:
    """
    Human-readable provenance string, e.g. "source:fb, medium:cpc".

    Falls back to "Landing page: <name>" when the visit carried no UTM data.
    """
    tokens = [
        f"{label}:{value}"
        for label, value in (
            ("source", utm_source),
            ("medium", utm_medium),
            ("campaign", utm_campaign),
        )
        if value
    ]
    if tokens:
        return ", ".join(tokens)
    return f"Landing page: {landing_page_name}"


def map_insurance_status(insurance: Optional[str]) -> Optional[InsuranceStatus]:
    """Bucket the free-text insurance answer; None when nothing was answered."""
    answer = _normalize(insurance)
    if answer is None:
        return None
    if "yes" in answer:
        return InsuranceStatus.HAS_INSURANCE
    # "not sure" contains "no", so it must be checked first
    if "not sure" in answer:
        return InsuranceStatus.UNKNOWN
    if "no" in answer:
        return InsuranceStatus.NO_INSURANCE
    return InsuranceStatus.UNKNOWN
