"""Narrow client interfaces for the storage provider."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol


class BucketLister(Protocol):
    def list_buckets(self, project_id: Optional[str] = None) -> List[str]:  # pragma: no cover - interface
        ...


class LabelReader(Protocol):
    def get_labels(self, bucket_id: str) -> Dict[str, str]:  # pragma: no cover - interface
        ...


class ObjectCopier(Protocol):
    def copy(
        self,
        source: str,
        destination: str,
        *,
        header: Optional[str] = None,
        gzip_encoding: bool = True,
    ) -> None:  # pragma: no cover - interface
        ...


class ACLGranter(Protocol):
    def grant_public_read(self, bucket_id: str) -> None:  # pragma: no cover - interface
        ...


class StorageClient(BucketLister, LabelReader, ObjectCopier, ACLGranter, Protocol):
    """Everything a release run needs from the storage provider."""

    def infer_project(self) -> Optional[str]:  # pragma: no cover - interface
        ...
