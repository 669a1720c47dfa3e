from __future__ import annotations

"""
Diagnostics and error classification utilities.

This package currently provides:
- error_classifier: map raw error text to an error type, a severity and
  remediation suggestions that are surfaced in the UI and aggregated by
  the memory store.

The goal is to keep classification logic centralized and deterministic.
"""

from .error_classifier import (  # noqa: F401
    assess_severity,
    classify,
    detect_error_type,
    generate_suggestions,
)
