"""Local execution of the CI pipeline."""

from stackdock.pipeline.runner import (
    FAILED,
    OK,
    SKIPPED,
    PipelineResult,
    StepResult,
    run_pipeline,
)
from stackdock.pipeline.steps import PipelineParams, Step, build_pipeline, uncommitted_changes

__all__ = [
    "FAILED",
    "OK",
    "SKIPPED",
    "PipelineParams",
    "PipelineResult",
    "Step",
    "StepResult",
    "build_pipeline",
    "run_pipeline",
    "uncommitted_changes",
]
