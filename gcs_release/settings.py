"""Release settings assembled from CLI flags, a YAML file and named inputs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .deploy.models import FailurePolicy
from .errors import ConfigurationError
from .inputs import InputSpec, format_attempts, register_input, resolve_input_info
from .schemas.deploy import DeploymentRequest, LabelFilter

logger = logging.getLogger(__name__)

INPUTS: Dict[str, InputSpec] = {
    "from-path": InputSpec(name="from-path", description="Folder path (relative to working directory) to upload"),
    "to-path": InputSpec(name="to-path", description="Path in GCS to upload the folder to"),
    "header": InputSpec(name="header", description="Header to set when uploading files to GCS"),
    "labels": InputSpec(
        name="labels",
        description="Comma-delimited labels to match when searching for buckets (i.e. service=foo,environment=bar)",
    ),
    "public": InputSpec(name="public", description="Specifies if the uploaded files can be publicly accessed"),
    "project-id": InputSpec(
        name="project-id",
        description="Project hosting the buckets, if other than the project of the service account",
    ),
    "artifacts-name": InputSpec(name="artifacts-name", description="Name of the artifacts to download"),
    "service-account": InputSpec(
        name="service-account",
        description="GCP service account to impersonate by the current Workload Identity",
        required=True,
    ),
    "workload-identity-provider": InputSpec(
        name="workload-identity-provider",
        description="Workload Identity Provider name, i.e. projects/123/locations/global/workloadIdentityPools/pool/providers/provider",
        required=True,
    ),
    "policy": InputSpec(name="policy", description="Failure policy: fail-fast or best-effort"),
    "summary-path": InputSpec(name="summary-path", description="Markdown file receiving the run summary"),
    "dry-run": InputSpec(name="dry-run", description="Log copy and ACL commands without running them"),
}

for _spec in INPUTS.values():
    register_input(_spec)


class ReleaseSettings(BaseModel):
    from_path: str = ""
    to_path: str = ""
    header: Optional[str] = None
    labels: Optional[str] = None
    public: bool = False
    project_id: Optional[str] = None
    artifacts_name: Optional[str] = None
    service_account: Optional[str] = None
    workload_identity_provider: Optional[str] = None
    policy: FailurePolicy = FailurePolicy.FAIL_FAST
    summary_path: Optional[Path] = None
    dry_run: bool = False
    workspace_root: Path = Field(default_factory=Path.cwd)

    model_config = ConfigDict(extra="forbid")

    @property
    def source_dir(self) -> Path:
        return self.workspace_root / self.from_path

    def require_identity(self) -> None:
        missing = [
            name
            for name in ("service-account", "workload-identity-provider")
            if not getattr(self, name.replace("-", "_"))
        ]
        if missing:
            details = "; ".join(f"{name}: {format_attempts(resolve_input_info(name))}" for name in missing)
            raise ConfigurationError(f"Missing required input(s) {', '.join(missing)}. Checked sources: {details}.")

    def label_filter(self) -> LabelFilter:
        return LabelFilter.parse(self.labels)

    def to_request(self) -> DeploymentRequest:
        # Local source is "${PWD}/${from-path}" with the wildcard appended at copy time.
        return DeploymentRequest(
            source_path=f"{self.workspace_root}/{self.from_path}",
            destination_path=self.to_path,
            header=self.header or None,
            public_read=self.public,
            filter=self.label_filter(),
        )


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping of workflow inputs (keys spelled like ``from-path``)."""

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping of inputs")
    unknown = sorted(str(key) for key in payload if str(key) not in INPUTS)
    if unknown:
        raise ConfigurationError(f"Unknown input(s) in {path}: {', '.join(unknown)}")
    return {str(key): value for key, value in payload.items()}


def build_settings(
    overrides: Optional[Mapping[str, object]] = None,
    *,
    config_path: Optional[Path] = None,
    workspace_root: Optional[Path] = None,
) -> ReleaseSettings:
    """Merge inputs, highest priority first: overrides, config file, input sources."""

    provided = {key: value for key, value in (overrides or {}).items() if value is not None}
    file_values = load_config_file(config_path) if config_path else {}

    values: Dict[str, object] = {}
    for name in INPUTS:
        if name in provided:
            values[name] = provided[name]
        elif name in file_values and file_values[name] is not None:
            values[name] = file_values[name]
        else:
            resolved = resolve_input_info(name)
            if resolved.value is not None:
                logger.debug("Input '%s' resolved from %s", name, resolved.source)
                values[name] = resolved.value

    fields = {name.replace("-", "_"): value for name, value in values.items()}
    if workspace_root is not None:
        fields["workspace_root"] = workspace_root
    try:
        return ReleaseSettings.model_validate(fields)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid release inputs: {exc}") from exc
