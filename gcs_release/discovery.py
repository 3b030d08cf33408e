"""Bucket discovery and label filtering."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .schemas.deploy import Bucket, LabelFilter
from .storage.clients import BucketLister, LabelReader

logger = logging.getLogger(__name__)


def discover_buckets(
    lister: BucketLister,
    reader: LabelReader,
    *,
    project_id: Optional[str] = None,
) -> List[Bucket]:
    """List every visible bucket and read its labels, one bucket at a time."""

    bucket_ids = lister.list_buckets(project_id)
    buckets: List[Bucket] = []
    seen = set()
    for bucket_id in bucket_ids:
        if bucket_id in seen:
            continue
        seen.add(bucket_id)
        labels = reader.get_labels(bucket_id)
        buckets.append(Bucket(id=bucket_id, labels=dict(labels)))
    logger.info("Discovered %d bucket(s)%s", len(buckets), f" in project {project_id}" if project_id else "")
    return buckets


def select_buckets(buckets: Sequence[Bucket], label_filter: LabelFilter) -> List[Bucket]:
    """Return the buckets whose labels satisfy every filter term, in input order."""

    selected: List[Bucket] = []
    for bucket in buckets:
        if label_filter.matches(bucket.labels):
            selected.append(bucket)
        else:
            logger.debug("Bucket %s does not match %s", bucket.id, label_filter.to_string())
    return selected


def find_buckets(
    lister: BucketLister,
    reader: LabelReader,
    label_filter: LabelFilter,
    *,
    project_id: Optional[str] = None,
) -> List[Bucket]:
    buckets = discover_buckets(lister, reader, project_id=project_id)
    selected = select_buckets(buckets, label_filter)
    logger.info(
        "%d of %d bucket(s) match labels '%s'",
        len(selected),
        len(buckets),
        label_filter.to_string(),
    )
    return selected
