from __future__ import annotations

import os
from typing import Dict, Iterator, List, Optional, Set, Tuple

import pytest

from gcs_release import inputs
from gcs_release.errors import ACLError, CopyError, DiscoveryError
from gcs_release.schemas import destination_uri


class FakeStorage:
    """In-memory storage client recording every call in order."""

    def __init__(
        self,
        buckets: Optional[Dict[str, Dict[str, str]]] = None,
        *,
        project: Optional[str] = None,
        fail_copy: Optional[Set[str]] = None,
        fail_acl: Optional[Set[str]] = None,
        fail_listing: bool = False,
        fail_labels: Optional[Set[str]] = None,
    ) -> None:
        self.buckets = dict(buckets or {})
        self.project = project
        self.fail_copy = set(fail_copy or ())
        self.fail_acl = set(fail_acl or ())
        self.fail_listing = fail_listing
        self.fail_labels = set(fail_labels or ())
        self.calls: List[Tuple[str, ...]] = []
        self.copies: List[Tuple[str, str, Optional[str]]] = []
        self.acl_grants: List[str] = []
        self.listing_project: Optional[str] = None
        self.logs: List[str] = []

    def infer_project(self) -> Optional[str]:
        self.calls.append(("infer_project",))
        return self.project

    def list_buckets(self, project_id: Optional[str] = None) -> List[str]:
        self.calls.append(("list_buckets", project_id or ""))
        self.listing_project = project_id
        if self.fail_listing:
            raise DiscoveryError("listing failed", returncode=1)
        return list(self.buckets)

    def get_labels(self, bucket_id: str) -> Dict[str, str]:
        self.calls.append(("get_labels", bucket_id))
        if bucket_id in self.fail_labels:
            raise DiscoveryError(f"labels of {bucket_id} failed", returncode=1)
        return dict(self.buckets[bucket_id])

    def copy(self, source: str, destination: str, *, header: Optional[str] = None, gzip_encoding: bool = True) -> None:
        self.calls.append(("copy", source, destination))
        if any(destination.startswith(destination_uri(bucket, "")) for bucket in self.fail_copy):
            raise CopyError(f"copy to {destination} failed", returncode=1)
        self.copies.append((source, destination, header))

    def grant_public_read(self, bucket_id: str) -> None:
        self.calls.append(("grant_public_read", bucket_id))
        if bucket_id in self.fail_acl:
            raise ACLError(f"acl on {bucket_id} failed", returncode=1)
        self.acl_grants.append(bucket_id)


class RecordingSink:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def append(self, outcome) -> None:
        self.lines.append(outcome.summary_line())


@pytest.fixture(autouse=True)
def _isolate_inputs(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    inputs.reset_sources()
    for name in list(os.environ):
        if name.startswith(("GCS_RELEASE_", "INPUT_")) or name in ("GITHUB_STEP_SUMMARY", "GITHUB_TOKEN", "GH_TOKEN"):
            monkeypatch.delenv(name, raising=False)
    yield
    inputs.reset_sources()


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage(
        {
            "gs://a/": {"service": "x", "env": "prod"},
            "gs://b/": {"service": "y", "env": "prod"},
            "gs://c/": {"service": "x", "env": "dev"},
        }
    )


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()
