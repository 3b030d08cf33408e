"""Deploy a local folder to every Google Cloud Storage bucket matching a label filter."""

__version__ = "0.1.0"
from .deploy import DeploymentOutcome, DeploymentResult, FailurePolicy, deploy
from .discovery import discover_buckets, find_buckets, select_buckets
from .errors import (
    ACLError,
    ArtifactError,
    ConfigurationError,
    CopyError,
    DiscoveryError,
    ReleaseError,
)
from .inputs import describe_input, list_inputs, resolve_input, resolve_input_info, use_dotenv
from .release import run_release
from .schemas import Bucket, DeploymentRequest, LabelFilter, destination_uri
from .settings import ReleaseSettings, build_settings
from .storage import GsutilClient

__all__ = [
    "__version__",
    "Bucket",
    "DeploymentRequest",
    "LabelFilter",
    "destination_uri",
    "DeploymentOutcome",
    "DeploymentResult",
    "FailurePolicy",
    "deploy",
    "discover_buckets",
    "find_buckets",
    "select_buckets",
    "ReleaseError",
    "ConfigurationError",
    "DiscoveryError",
    "CopyError",
    "ACLError",
    "ArtifactError",
    "describe_input",
    "list_inputs",
    "resolve_input",
    "resolve_input_info",
    "use_dotenv",
    "run_release",
    "ReleaseSettings",
    "build_settings",
    "GsutilClient",
]
