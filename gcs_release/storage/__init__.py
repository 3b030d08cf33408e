"""Storage provider clients."""

from .clients import ACLGranter, BucketLister, LabelReader, ObjectCopier, StorageClient
from .gsutil import GsutilClient

__all__ = [
    "ACLGranter",
    "BucketLister",
    "LabelReader",
    "ObjectCopier",
    "StorageClient",
    "GsutilClient",
]
