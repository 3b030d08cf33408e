"""Append-only Markdown run summary."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Protocol

from .deploy.models import DeploymentOutcome, DeploymentResult

logger = logging.getLogger(__name__)

STEP_SUMMARY_ENV = "GITHUB_STEP_SUMMARY"


class SummarySink(Protocol):
    def append(self, outcome: DeploymentOutcome) -> None:  # pragma: no cover - interface
        ...


class StepSummary:
    """Writes one Markdown line per outcome to the job summary file.

    Without a path (and no ``GITHUB_STEP_SUMMARY``), lines are only logged.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is None:
            env_path = os.getenv(STEP_SUMMARY_ENV)
            path = Path(env_path) if env_path else None
        self.path = path
        self.lines: List[str] = []

    def append(self, outcome: DeploymentOutcome) -> None:
        line = outcome.summary_line()
        self.lines.append(line)
        logger.info(line)
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


def render_summary(result: DeploymentResult) -> str:
    return "\n".join(outcome.summary_line() for outcome in result.outcomes) + "\n"
