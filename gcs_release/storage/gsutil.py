"""Storage client backed by the gsutil and gcloud command-line tools."""

from __future__ import annotations

import glob
import json
import logging
import subprocess
from typing import Dict, List, Optional, Sequence, Type

from ..errors import ACLError, CopyError, DiscoveryError, StorageCommandError

logger = logging.getLogger(__name__)

NO_LABELS_MARKER = "has no label configuration"


class GsutilClient:
    """Implements the storage protocols by invoking ``gsutil``.

    Discovery calls always execute. With ``dry_run`` enabled, copy and ACL
    commands are logged and recorded but not run.
    """

    def __init__(
        self,
        *,
        gsutil: str = "gsutil",
        gcloud: str = "gcloud",
        parallel: bool = True,
        dry_run: bool = False,
    ) -> None:
        self.gsutil = gsutil
        self.gcloud = gcloud
        self.parallel = parallel
        self.dry_run = dry_run
        self.logs: List[str] = []

    def infer_project(self) -> Optional[str]:
        cmd = [self.gcloud, "config", "get-value", "project"]
        proc = self._run(cmd, DiscoveryError, "Unable to read the active gcloud project")
        value = proc.stdout.strip()
        if not value or value == "(unset)":
            return None
        return value

    def list_buckets(self, project_id: Optional[str] = None) -> List[str]:
        cmd = [self.gsutil, "ls"]
        if project_id:
            cmd.extend(["-p", project_id])
        proc = self._run(cmd, DiscoveryError, "Bucket listing failed")
        return [line.strip() for line in proc.stdout.splitlines() if line.strip()]

    def get_labels(self, bucket_id: str) -> Dict[str, str]:
        cmd = [self.gsutil, "label", "get", bucket_id]
        proc = self._run(cmd, DiscoveryError, f"Reading labels of {bucket_id} failed")
        output = proc.stdout.strip()
        if not output or NO_LABELS_MARKER in output or NO_LABELS_MARKER in proc.stderr:
            return {}
        try:
            payload = json.loads(output)
        except json.JSONDecodeError as exc:
            raise DiscoveryError(
                f"Labels of {bucket_id} are not valid JSON: {exc}",
                command=cmd,
                returncode=proc.returncode,
                stderr=proc.stderr,
            ) from exc
        if not isinstance(payload, dict):
            raise DiscoveryError(f"Labels of {bucket_id} are not a JSON object", command=cmd)
        return {str(key): str(value) for key, value in payload.items()}

    def copy(
        self,
        source: str,
        destination: str,
        *,
        header: Optional[str] = None,
        gzip_encoding: bool = True,
    ) -> None:
        sources = sorted(glob.glob(source))
        if not sources:
            raise CopyError(f"No files match {source}", command=[source])

        cmd = [self.gsutil]
        if self.parallel:
            cmd.append("-m")
        if header:
            cmd.extend(["-h", header])
        cmd.append("cp")
        if gzip_encoding:
            cmd.append("-Z")
        cmd.append("-r")
        cmd.extend(sources)
        cmd.append(destination)
        self._execute(cmd, CopyError, f"Copy to {destination} failed")

    def grant_public_read(self, bucket_id: str) -> None:
        cmd = [self.gsutil, "acl", "ch", "-u", "AllUsers:R", bucket_id]
        self._execute(cmd, ACLError, f"Granting public read on {bucket_id} failed")

    def _execute(self, cmd: Sequence[str], error: Type[StorageCommandError], message: str) -> None:
        if self.dry_run:
            self.logs.append(f"Dry run: {' '.join(cmd)}")
            logger.info("Dry run, skipping: %s", " ".join(cmd))
            return
        self._run(cmd, error, message)

    def _run(
        self,
        cmd: Sequence[str],
        error: Type[StorageCommandError],
        message: str,
    ) -> subprocess.CompletedProcess:
        self.logs.append(" ".join(cmd))
        logger.debug("Executing %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                list(cmd),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise error(f"{message}: {exc}", command=cmd) from exc
        if proc.stderr:
            self.logs.append(proc.stderr.strip())
        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            raise error(
                f"{message} (exit {proc.returncode}): {stderr}",
                command=cmd,
                returncode=proc.returncode,
                stderr=stderr,
            )
        return proc
