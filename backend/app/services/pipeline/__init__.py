from __future__ import annotations

"""
Error-processing pipeline package.

This package provides:
- ErrorPipeline: the staged validate -> classify -> aggregate runner
- PipelineRun / PipelineState: per-request state machine
- PipelineOutcome: what a successful run hands back to the API layer
"""

from .runner import (  # noqa: F401
    ErrorPipeline,
    PipelineOutcome,
    PipelineRun,
    PipelineState,
)
