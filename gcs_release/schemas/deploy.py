"""Pydantic models describing buckets and deployment requests."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ConfigurationError


class Bucket(BaseModel):
    id: str = Field(..., description="Bucket URI as printed by the listing call, e.g. gs://site/.")
    labels: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)


class LabelFilter(BaseModel):
    """Ordered conjunction of key=value terms matched against bucket labels."""

    terms: List[Tuple[str, str]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def parse(cls, text: Optional[str]) -> "LabelFilter":
        """Parse a comma-delimited ``key=value`` string such as ``service=foo,env=prod``."""

        if not text:
            return cls()
        terms: List[Tuple[str, str]] = []
        for raw in text.split(","):
            token = raw.strip()
            if not token:
                continue
            if "=" not in token:
                raise ConfigurationError(f"Label filter term must be key=value (got '{token}')")
            key, value = token.split("=", 1)
            key = key.strip()
            if not key:
                raise ConfigurationError(f"Label filter term has an empty key (got '{token}')")
            terms.append((key, value.strip()))
        return cls(terms=terms)

    def matches(self, labels: Mapping[str, str]) -> bool:
        for key, value in self.terms:
            if labels.get(key) != value:
                return False
        return True

    def to_string(self) -> str:
        return ",".join(f"{key}={value}" for key, value in self.terms)

    def __bool__(self) -> bool:
        return bool(self.terms)


class DeploymentRequest(BaseModel):
    source_path: str = Field(..., description="Local folder whose direct children are uploaded.")
    destination_path: str = Field(default="", description="Bucket-relative destination prefix.")
    header: Optional[str] = Field(default=None, description="Metadata header applied to every uploaded object.")
    public_read: bool = False
    filter: LabelFilter = Field(default_factory=LabelFilter)
    gzip_encoding: bool = Field(default=True, description="Upload with gzip transfer encoding (gsutil cp -Z).")

    model_config = ConfigDict(extra="forbid")

    @property
    def effective_source(self) -> str:
        """Wildcard over the direct children of ``source_path``, never the folder itself."""

        return f"{self.source_path.rstrip('/')}/*"


def destination_uri(bucket_id: str, destination_path: str) -> str:
    """Join a bucket URI and a bucket-relative path with exactly one slash."""

    root = bucket_id.rstrip("/")
    path = (destination_path or "").lstrip("/")
    return f"{root}/{path}"
