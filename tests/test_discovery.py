from __future__ import annotations

import pytest

from conftest import FakeStorage
from gcs_release.discovery import discover_buckets, find_buckets, select_buckets
from gcs_release.errors import DiscoveryError
from gcs_release.schemas.deploy import Bucket, LabelFilter


def _buckets() -> list[Bucket]:
    return [
        Bucket(id="gs://a/", labels={"service": "x", "env": "prod"}),
        Bucket(id="gs://b/", labels={"service": "y", "env": "prod"}),
        Bucket(id="gs://c/", labels={"service": "x", "env": "dev"}),
        Bucket(id="gs://d/", labels={}),
    ]


def test_select_buckets_conjunctive_filter() -> None:
    selected = select_buckets(_buckets(), LabelFilter.parse("service=x,env=prod"))
    assert [bucket.id for bucket in selected] == ["gs://a/"]


def test_select_buckets_single_term_preserves_order() -> None:
    selected = select_buckets(_buckets(), LabelFilter.parse("env=prod"))
    assert [bucket.id for bucket in selected] == ["gs://a/", "gs://b/"]


def test_select_buckets_empty_filter_returns_all() -> None:
    buckets = _buckets()
    assert select_buckets(buckets, LabelFilter()) == buckets


def test_select_buckets_does_not_mutate_input() -> None:
    buckets = _buckets()
    before = [bucket.model_dump() for bucket in buckets]
    select_buckets(buckets, LabelFilter.parse("service=x"))
    assert [bucket.model_dump() for bucket in buckets] == before


def test_select_buckets_no_match() -> None:
    assert select_buckets(_buckets(), LabelFilter.parse("service=z")) == []


def test_discover_buckets_reads_labels_in_listing_order(storage: FakeStorage) -> None:
    buckets = discover_buckets(storage, storage, project_id="proj")
    assert [bucket.id for bucket in buckets] == ["gs://a/", "gs://b/", "gs://c/"]
    assert buckets[1].labels == {"service": "y", "env": "prod"}
    assert storage.calls == [
        ("list_buckets", "proj"),
        ("get_labels", "gs://a/"),
        ("get_labels", "gs://b/"),
        ("get_labels", "gs://c/"),
    ]


def test_discover_buckets_skips_duplicate_ids() -> None:
    class DuplicateLister(FakeStorage):
        def list_buckets(self, project_id=None):
            return ["gs://a/", "gs://a/", "gs://b/"]

    storage = DuplicateLister({"gs://a/": {}, "gs://b/": {}})
    buckets = discover_buckets(storage, storage)
    assert [bucket.id for bucket in buckets] == ["gs://a/", "gs://b/"]


def test_discover_buckets_listing_failure() -> None:
    storage = FakeStorage({"gs://a/": {}}, fail_listing=True)
    with pytest.raises(DiscoveryError):
        discover_buckets(storage, storage)


def test_find_buckets_label_failure_returns_nothing(storage: FakeStorage) -> None:
    storage.fail_labels = {"gs://b/"}
    with pytest.raises(DiscoveryError):
        find_buckets(storage, storage, LabelFilter.parse("service=x"))


def test_find_buckets_scenario() -> None:
    storage = FakeStorage(
        {
            "gs://a": {"service": "x", "env": "prod"},
            "gs://b": {"service": "y", "env": "prod"},
        }
    )
    selected = find_buckets(storage, storage, LabelFilter.parse("service=x,env=prod"))
    assert [bucket.id for bucket in selected] == ["gs://a"]
