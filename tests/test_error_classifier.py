"""
Unit tests for the rule-based error classifier.
"""

import pytest

from app.models import ErrorType, Severity
from app.services.diagnostics import (
    assess_severity,
    classify,
    detect_error_type,
    generate_suggestions,
)
from app.services.diagnostics.error_classifier import BASELINE_SUGGESTIONS


class TestDetectErrorType:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("SyntaxError: unexpected token", ErrorType.SYNTAX),
            ("TypeError: x is not a function", ErrorType.TYPE),
            ("ReferenceError: foo is not defined", ErrorType.REFERENCE),
            ("NETWORK unreachable", ErrorType.NETWORK),
            ("Request Timeout after 30s", ErrorType.TIMEOUT),
            ("disk is full on host", ErrorType.GENERAL),
        ],
    )
    def test_keyword_mapping(self, text: str, expected: ErrorType) -> None:
        assert detect_error_type(text) == expected

    def test_priority_order(self) -> None:
        """syntax beats type, which beats network and timeout."""
        assert detect_error_type("type syntax network") == ErrorType.SYNTAX
        assert detect_error_type("network timeout on type lookup") == ErrorType.TYPE
        assert detect_error_type("timeout talking to network") == ErrorType.NETWORK


class TestAssessSeverity:
    @pytest.mark.parametrize("text", ["FATAL: out of memory", "critical failure", "Fatal Error"])
    def test_critical_keywords(self, text: str) -> None:
        assert assess_severity(text) == Severity.CRITICAL

    def test_critical_beats_lower_keywords(self) -> None:
        text = "Warning: unhandled exception escalated to a fatal error"
        assert assess_severity(text) == Severity.CRITICAL

    def test_error_and_exception_are_high(self) -> None:
        assert assess_severity("an Exception occurred") == Severity.HIGH
        assert assess_severity("warning: error while saving") == Severity.HIGH

    def test_warning_is_medium(self) -> None:
        assert assess_severity("deprecation WARNING") == Severity.MEDIUM

    def test_fallback_is_low(self) -> None:
        assert assess_severity("disk is full on host") == Severity.LOW


class TestGenerateSuggestions:
    def test_baseline_only(self) -> None:
        assert generate_suggestions("disk is full") == list(BASELINE_SUGGESTIONS)

    def test_rule_groups_append_in_order(self) -> None:
        suggestions = generate_suggestions("timeout after syntax check on network call")
        assert suggestions == [
            "Review error logs for additional context",
            "Check recent code changes",
            "Validate code syntax",
            "Check for missing brackets or semicolons",
            "Verify network connectivity",
            "Check API endpoints",
            "Increase timeout duration",
            "Optimize query performance",
        ]


class TestClassify:
    def test_type_error_example(self) -> None:
        result = classify("TypeError: Cannot read property 'name' of undefined")

        assert result.error_type == ErrorType.TYPE
        assert result.severity == Severity.HIGH
        assert result.suggestions == BASELINE_SUGGESTIONS
        assert result.processed_at.tzinfo is not None

    @pytest.mark.parametrize(
        "text",
        ["disk is full on host", "?", "   leading spaces kept", "unicode ✓ only"],
    )
    def test_unrecognised_text_is_general_and_low(self, text: str) -> None:
        result = classify(text)
        assert result.error_type == ErrorType.GENERAL
        assert result.severity == Severity.LOW

    def test_is_deterministic(self) -> None:
        first = classify("Network error: connection reset")
        second = classify("Network error: connection reset")
        assert (first.error_type, first.severity, first.suggestions) == (
            second.error_type,
            second.severity,
            second.suggestions,
        )
