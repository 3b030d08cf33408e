"""End-to-end release run: inputs, artifacts, discovery, fan-out."""

from __future__ import annotations

import logging
from typing import Optional

from .artifacts import ArtifactFetcher
from .deploy.deployer import deploy
from .deploy.models import DeploymentResult
from .discovery import find_buckets
from .errors import ConfigurationError
from .settings import ReleaseSettings
from .storage.clients import StorageClient
from .summary import SummarySink

logger = logging.getLogger(__name__)


def run_release(
    settings: ReleaseSettings,
    *,
    storage: StorageClient,
    fetcher: Optional[ArtifactFetcher] = None,
    sink: Optional[SummarySink] = None,
) -> DeploymentResult:
    """Deploy ``settings.from_path`` to every bucket matching ``settings.labels``.

    Configuration problems are reported before any external call is made.
    """

    settings.require_identity()
    request = settings.to_request()
    if settings.artifacts_name and fetcher is None:
        raise ConfigurationError(f"Artifacts '{settings.artifacts_name}' requested but no artifact fetcher configured.")

    if settings.artifacts_name:
        destination = settings.source_dir
        logger.info("Fetching artifacts '%s' into %s", settings.artifacts_name, destination)
        fetcher.fetch(settings.artifacts_name, destination)

    project_id = settings.project_id or storage.infer_project()
    selected = find_buckets(storage, storage, request.filter, project_id=project_id)
    result = deploy(
        selected,
        request,
        copier=storage,
        acl=storage,
        policy=settings.policy,
        sink=sink,
    )
    if project_id:
        result.logs.insert(0, f"Project: {project_id}")
    return result
