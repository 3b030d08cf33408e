"""Data models produced by a deployment run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..schemas.deploy import DeploymentRequest

SKIPPED_MESSAGE = "No GCS bucket(s) found, deployment skipped."


class FailurePolicy(str, Enum):
    FAIL_FAST = "fail-fast"
    BEST_EFFORT = "best-effort"


@dataclass(slots=True)
class DeploymentOutcome:
    status: str
    source_path: str
    bucket: Optional[str] = None
    destination_path: Optional[str] = None
    public_read: bool = False
    uploaded: bool = False
    error: Optional[str] = None

    @classmethod
    def skipped(cls, request: DeploymentRequest) -> "DeploymentOutcome":
        return cls(status="skipped", source_path=request.effective_source)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    def summary_line(self) -> str:
        if self.status == "skipped":
            return SKIPPED_MESSAGE
        if self.status == "failed" and self.uploaded:
            return f"- Uploaded `{self.source_path}` to `{self.destination_path}` but granting public read failed: {self.error}"
        if self.status == "failed":
            return f"- Failed to upload `{self.source_path}` to `{self.destination_path}`: {self.error}"
        suffix = " (public)" if self.public_read else ""
        return f"- Uploaded `{self.source_path}` to `{self.destination_path}`{suffix}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status,
            "bucket": self.bucket,
            "source_path": self.source_path,
            "destination_path": self.destination_path,
            "public_read": self.public_read,
            "uploaded": self.uploaded,
            "error": self.error,
        }


@dataclass(slots=True)
class DeploymentResult:
    policy: FailurePolicy
    selected: List[str] = field(default_factory=list)
    outcomes: List[DeploymentOutcome] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)
    finished_at: Optional[datetime] = None

    @property
    def failures(self) -> List[DeploymentOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == "failed"]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def skipped(self) -> bool:
        return len(self.outcomes) == 1 and self.outcomes[0].status == "skipped"

    def to_dict(self) -> Dict[str, object]:
        return {
            "policy": self.policy.value,
            "selected": list(self.selected),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "succeeded": self.succeeded,
            "logs": list(self.logs),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
