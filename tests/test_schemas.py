from __future__ import annotations

import pytest

from gcs_release.errors import ConfigurationError
from gcs_release.schemas.deploy import DeploymentRequest, LabelFilter, destination_uri


def test_parse_label_filter_keeps_order() -> None:
    label_filter = LabelFilter.parse("service=x,env=prod")
    assert label_filter.terms == [("service", "x"), ("env", "prod")]
    assert label_filter.to_string() == "service=x,env=prod"


def test_parse_label_filter_strips_whitespace_and_empty_tokens() -> None:
    label_filter = LabelFilter.parse(" service = x ,, env=prod,")
    assert label_filter.terms == [("service", "x"), ("env", "prod")]


def test_parse_label_filter_splits_on_first_equals() -> None:
    label_filter = LabelFilter.parse("query=a=b")
    assert label_filter.terms == [("query", "a=b")]


@pytest.mark.parametrize("text", [None, ""])
def test_parse_empty_label_filter(text) -> None:
    label_filter = LabelFilter.parse(text)
    assert label_filter.terms == []
    assert not label_filter
    assert label_filter.matches({})


@pytest.mark.parametrize("text", ["env", "service=x,env", "=prod"])
def test_parse_malformed_label_filter(text: str) -> None:
    with pytest.raises(ConfigurationError):
        LabelFilter.parse(text)


def test_label_filter_matches_superset_only() -> None:
    label_filter = LabelFilter.parse("service=x,env=prod")
    assert label_filter.matches({"service": "x", "env": "prod", "team": "web"})
    assert not label_filter.matches({"service": "x"})
    assert not label_filter.matches({"service": "x", "env": "dev"})


def test_label_filter_is_case_sensitive() -> None:
    label_filter = LabelFilter.parse("env=prod")
    assert not label_filter.matches({"env": "Prod"})
    assert not label_filter.matches({"ENV": "prod"})


def test_effective_source_appends_wildcard() -> None:
    request = DeploymentRequest(source_path="/work/dist/", destination_path="site")
    assert request.effective_source == "/work/dist/*"
    assert request.public_read is False
    assert request.header is None


def test_effective_source_without_trailing_slash_stays_inside_folder() -> None:
    assert DeploymentRequest(source_path="/work/dist").effective_source == "/work/dist/*"
    assert DeploymentRequest(source_path="/work/dist//").effective_source == "/work/dist/*"


@pytest.mark.parametrize(
    ("bucket", "path", "expected"),
    [
        ("gs://a", "to-path", "gs://a/to-path"),
        ("gs://a/", "to-path", "gs://a/to-path"),
        ("gs://a/", "/to-path/", "gs://a/to-path/"),
        ("gs://a/", "", "gs://a/"),
    ],
)
def test_destination_uri(bucket: str, path: str, expected: str) -> None:
    assert destination_uri(bucket, path) == expected
