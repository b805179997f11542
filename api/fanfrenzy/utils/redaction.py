"""Redaction of ordering hints from moment context.

Shuffle players must order moments from their narrative alone, so scores,
clock readings, periods and field positions are masked before the text is
served.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FALLBACK_CONTEXT = "(Context Details Hidden)"

SCORE_HIDDEN = "(Score Hidden)"
TIME_HIDDEN = "(Time Hidden)"
PERIOD_HIDDEN = "(Period Hidden)"
FIELD_POSITION_HIDDEN = "(Field Position Hidden)"
INFO_HIDDEN = "(Info Hidden)"


@dataclass(frozen=True)
class RedactionRule:
    name: str
    pattern: re.Pattern[str]
    replacement: str


# Applied in order; later rules see the output of earlier ones.
REDACTION_RULES: tuple[RedactionRule, ...] = (
    RedactionRule("score", re.compile(r"score:?\s*\d+\s*[-–—]\s*\d+", re.IGNORECASE), SCORE_HIDDEN),
    RedactionRule("lead_state", re.compile(r"(?:leads?|trails?|tied)\s*\d+\s*[-–—]\s*\d+", re.IGNORECASE), SCORE_HIDDEN),
    RedactionRule("time_left", re.compile(r"\d+\s*(?:minutes?|seconds?|mins?|secs?)\s*left", re.IGNORECASE), TIME_HIDDEN),
    RedactionRule("clock", re.compile(r"\b\d{1,2}:\d{2}\b"), TIME_HIDDEN),
    RedactionRule("quarter", re.compile(r"\bQ[1-4]\b", re.IGNORECASE), PERIOD_HIDDEN),
    RedactionRule(
        "half_inning",
        re.compile(r"\b(?:Top|Bottom|Mid)[-\s]?\d+(?:st|nd|rd|th)?\s*(?:inning|quarter)?", re.IGNORECASE),
        PERIOD_HIDDEN,
    ),
    RedactionRule("ordinal_period", re.compile(r"\b\d+(?:st|nd|rd|th)\s*(?:quarter|inning)", re.IGNORECASE), PERIOD_HIDDEN),
    RedactionRule(
        "field_position",
        re.compile(
            r"\b(?:at|on|to|near)\s+(?:the\s+)?(?:own\s+|opponent's\s+)?"
            r"(\d{1,2}[-\s]?yard\s+line|goal\s+line|midfield|\d{1,2})\b",
            re.IGNORECASE,
        ),
        FIELD_POSITION_HIDDEN,
    ),
    RedactionRule(
        "yard_line",
        re.compile(r"\b(\d{1,2}[-\s]?yard\s+line|goal\s+line|midfield)\b", re.IGNORECASE),
        FIELD_POSITION_HIDDEN,
    ),
    RedactionRule("start_marker", re.compile(r"^START:\s*", re.IGNORECASE), ""),
    RedactionRule("end_marker", re.compile(r"\s*END:?$", re.IGNORECASE), ""),
    # Single-word markers only; "(Field Position Hidden)" is left as is.
    RedactionRule("collapse_markers", re.compile(r"\((\w+\sHidden)\)(\s*\(\w+\sHidden\))+"), INFO_HIDDEN),
)


def sanitize_context(text: str | None, rules: tuple[RedactionRule, ...] = REDACTION_RULES) -> str:
    """Mask ordering hints in ``text``; never returns an empty string."""
    if not text:
        return FALLBACK_CONTEXT

    sanitized = text
    applied: list[str] = []
    for rule in rules:
        sanitized, count = rule.pattern.subn(rule.replacement, sanitized)
        if count:
            applied.append(rule.name)

    sanitized = sanitized.strip()
    if applied:
        logger.debug("context_redacted", extra={"rules": applied, "original_length": len(text)})
    return sanitized or FALLBACK_CONTEXT
