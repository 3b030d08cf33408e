"""Fan-out deployment helpers."""

from .models import DeploymentOutcome, DeploymentResult, FailurePolicy
from .deployer import deploy

__all__ = [
    "DeploymentOutcome",
    "DeploymentResult",
    "FailurePolicy",
    "deploy",
]
