"""Schema definitions for deployment metadata."""

from .deploy import Bucket, DeploymentRequest, LabelFilter, destination_uri

__all__ = [
    "Bucket",
    "DeploymentRequest",
    "LabelFilter",
    "destination_uri",
]
