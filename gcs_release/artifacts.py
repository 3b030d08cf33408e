"""Download of build artifacts uploaded by an earlier job of the same run."""

from __future__ import annotations

import io
import logging
import os
import zipfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import requests
from requests import Response, Session
from requests.exceptions import RequestException

from .errors import ArtifactError
from .inputs import InputSpec, format_attempts, register_input, resolve_input_info

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_INPUT = "github-token"

register_input(
    InputSpec(
        name=DEFAULT_TOKEN_INPUT,
        description="Token used to download workflow artifacts",
        aliases=("GITHUB_TOKEN", "GH_TOKEN"),
    )
)


class ArtifactFetcher(Protocol):
    def fetch(self, name: str, destination: Path) -> Path:  # pragma: no cover - interface
        ...


class GitHubArtifactFetcher:
    """Fetch a named artifact of a workflow run through the GitHub REST API."""

    def __init__(
        self,
        *,
        repo: Optional[str] = None,
        run_id: Optional[str] = None,
        token_input: str = DEFAULT_TOKEN_INPUT,
        github_api: str = "https://api.github.com",
        session: Optional[Session] = None,
    ) -> None:
        self.repo = repo or os.getenv("GITHUB_REPOSITORY")
        self.run_id = run_id or os.getenv("GITHUB_RUN_ID")
        self.token_input = token_input
        self.github_api = github_api.rstrip("/")
        self.session = session or requests.Session()

    def fetch(self, name: str, destination: Path) -> Path:
        if not self.repo or not self.run_id:
            raise ArtifactError(
                "Repository and run id are required to download artifacts "
                "(set GITHUB_REPOSITORY and GITHUB_RUN_ID)."
            )
        headers = self._headers()

        listing = self._get(
            f"{self.github_api}/repos/{self.repo}/actions/runs/{self.run_id}/artifacts",
            headers=headers,
            params={"name": name},
        )
        try:
            payload = listing.json()
        except ValueError as exc:
            raise ArtifactError(f"Artifact listing for run {self.run_id} is not valid JSON: {exc}") from exc
        artifact = self._pick(payload, name)

        logger.info("Downloading artifact '%s' (%s bytes) to %s", name, artifact.get("size_in_bytes"), destination)
        archive = self._get(str(artifact["archive_download_url"]), headers=headers)
        _extract(archive.content, destination)
        return destination

    def _headers(self) -> Dict[str, str]:
        info = resolve_input_info(self.token_input)
        if not info.value:
            raise ArtifactError(
                f"Input '{self.token_input}' not resolved; cannot download artifacts. "
                f"Checked sources: {format_attempts(info)}."
            )
        return {
            "Authorization": f"Bearer {info.value}",
            "Accept": "application/vnd.github+json",
        }

    def _get(self, url: str, *, headers: Dict[str, str], params: Optional[Dict[str, str]] = None) -> Response:
        try:
            response: Response = self.session.get(url, headers=headers, params=params, timeout=60)
        except RequestException as exc:
            raise ArtifactError(f"Artifact request failed: {exc}") from exc
        if response.status_code != 200:
            raise ArtifactError(f"Artifact request to {url} returned {response.status_code}: {response.text or response.reason}")
        return response

    @staticmethod
    def _pick(payload: Dict[str, Any], name: str) -> Dict[str, Any]:
        for artifact in payload.get("artifacts", []):
            if artifact.get("name") == name and not artifact.get("expired", False):
                return artifact
        raise ArtifactError(f"Artifact '{name}' not found for this workflow run.")


def _extract(content: bytes, destination: Path) -> None:
    destination.mkdir(parents=True, exist_ok=True)
    root = destination.resolve()
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            for member in archive.namelist():
                target = (root / member).resolve()
                if target != root and root not in target.parents:
                    raise ArtifactError(f"Artifact entry escapes destination: {member}")
            archive.extractall(root)
    except zipfile.BadZipFile as exc:
        raise ArtifactError(f"Artifact archive is not a valid zip file: {exc}") from exc
