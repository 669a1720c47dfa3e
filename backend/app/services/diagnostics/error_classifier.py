from __future__ import annotations

"""backend/app/services/diagnostics/error_classifier.py

Centralized classification for submitted error reports.

This module looks at the raw text of an error report and assigns:
- an error type (Syntax / Type / Reference / Network / Timeout / General)
- a severity (low / medium / high / critical)
- an ordered list of remediation suggestions

The classification is:
- deterministic (no randomness)
- text-based (case-insensitive substring matching)
- priority-ordered (the first matching rule wins)

Everything here is pure; the pipeline rejects empty input before calling in.
"""

from typing import Optional

from app.models import ClassificationResult, ErrorType, Severity, utcnow

BASELINE_SUGGESTIONS: tuple[str, ...] = (
    "Review error logs for additional context",
    "Check recent code changes",
)

# Checked in order; the first keyword found decides the type.
ERROR_TYPE_RULES: tuple[tuple[str, ErrorType], ...] = (
    ("syntax", ErrorType.SYNTAX),
    ("type", ErrorType.TYPE),
    ("reference", ErrorType.REFERENCE),
    ("network", ErrorType.NETWORK),
    ("timeout", ErrorType.TIMEOUT),
)

SEVERITY_RULES: tuple[tuple[tuple[str, ...], Severity], ...] = (
    (("critical", "fatal"), Severity.CRITICAL),
    (("error", "exception"), Severity.HIGH),
    (("warning",), Severity.MEDIUM),
)

# Every matching group contributes, in this order.
SUGGESTION_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("syntax", ("Validate code syntax", "Check for missing brackets or semicolons")),
    ("network", ("Verify network connectivity", "Check API endpoints")),
    ("timeout", ("Increase timeout duration", "Optimize query performance")),
)


def _lower(value: Optional[str]) -> str:
    return (value or "").lower()


def _contains_any(haystack: str, needles: tuple[str, ...]) -> bool:
    return any(n in haystack for n in needles)


def detect_error_type(text: str) -> ErrorType:
    lowered = _lower(text)
    for keyword, error_type in ERROR_TYPE_RULES:
        if keyword in lowered:
            return error_type
    return ErrorType.GENERAL


def assess_severity(text: str) -> Severity:
    lowered = _lower(text)
    for keywords, severity in SEVERITY_RULES:
        if _contains_any(lowered, keywords):
            return severity
    return Severity.LOW


def generate_suggestions(text: str) -> list[str]:
    """Baseline suggestions followed by any rule-specific ones.

    Duplicates are kept; callers rely on append order.
    """
    lowered = _lower(text)
    suggestions = list(BASELINE_SUGGESTIONS)
    for keyword, extra in SUGGESTION_RULES:
        if keyword in lowered:
            suggestions.extend(extra)
    return suggestions


def classify(text: str) -> ClassificationResult:
    """Classify a raw error report.

    Never fails for non-empty input. Unknown text falls back to
    ``General Error`` with ``low`` severity and the baseline suggestions.
    """
    return ClassificationResult(
        error_type=detect_error_type(text),
        severity=assess_severity(text),
        suggestions=tuple(generate_suggestions(text)),
        processed_at=utcnow(),
    )
