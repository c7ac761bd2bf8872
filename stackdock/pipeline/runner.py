"""Sequential, fail-fast pipeline runner."""

import logging
import time
from dataclasses import dataclass, field

from stackdock.pipeline.steps import Step
from stackdock.provisioning.shell import run_shell_cmd

logger = logging.getLogger(__name__)

OK = "ok"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass
class StepResult:
    name: str
    status: str
    returncode: int = 0
    duration: float = 0.0


@dataclass
class PipelineResult:
    success: bool
    results: list[StepResult] = field(default_factory=list)
    failed_step: str | None = None


async def _execute(step: Step, run_shell, dry_run, cwd):
    if step.action is not None:
        return 0 if await step.action() else 1
    for command in step.commands:
        rc, _, stderr = await run_shell(command, dry_run=dry_run, stdin=step.stdin, cwd=cwd)
        if rc != 0:
            if stderr:
                logger.error(stderr.strip())
            return rc
    return 0


async def run_pipeline(steps: list[Step], run_shell=run_shell_cmd, dry_run=False, cwd=None) -> PipelineResult:
    """Run steps one after another and stop at the first failure.

    Steps after a failure are reported as skipped; nothing is retried and
    nothing already pushed or applied is rolled back.
    """
    results = []
    failed_step = None
    total = len(steps)

    for i, step in enumerate(steps, 1):
        if failed_step is not None:
            results.append(StepResult(step.name, SKIPPED))
            continue

        logger.info(f"[{i}/{total}] {step.name}")
        start = time.monotonic()
        rc = await _execute(step, run_shell, dry_run, cwd)
        duration = time.monotonic() - start

        if rc == 0:
            results.append(StepResult(step.name, OK, rc, duration))
        else:
            logger.error(f"Step '{step.name}' failed (exit {rc}); halting pipeline")
            results.append(StepResult(step.name, FAILED, rc, duration))
            failed_step = step.name

    success = failed_step is None
    if success:
        logger.info(f"Pipeline finished: {total} step(s) succeeded")
    else:
        skipped = [r.name for r in results if r.status == SKIPPED]
        logger.error(f"Pipeline failed at '{failed_step}'. Skipped: {', '.join(skipped) or '-'}")
    return PipelineResult(success, results, failed_step)
