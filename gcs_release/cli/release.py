"""Command-line entry point for GCS deployments."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

from gcs_release.artifacts import GitHubArtifactFetcher
from gcs_release.deploy.models import FailurePolicy
from gcs_release.discovery import discover_buckets
from gcs_release.errors import ConfigurationError, ReleaseError
from gcs_release.inputs import describe_input, list_inputs, use_dotenv
from gcs_release.release import run_release
from gcs_release.schemas.deploy import LabelFilter
from gcs_release.settings import build_settings
from gcs_release.storage.gsutil import GsutilClient
from gcs_release.summary import StepSummary

logger = logging.getLogger("gcs_release")

EXIT_FAILED = 1
EXIT_CONFIG = 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    workspace = _resolve_workspace(getattr(args, "workspace_root", None))
    dotenv = getattr(args, "env_file", None)
    if dotenv:
        use_dotenv(_resolve_path(dotenv, workspace))

    try:
        if args.command == "deploy":
            return _handle_deploy(args, workspace)
        if args.command == "buckets":
            return _handle_buckets(args)
        if args.command == "inputs":
            return _handle_inputs()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        _print_json({"status": "error", "error": str(exc)})
        return EXIT_CONFIG
    except ReleaseError as exc:
        logger.error("%s", exc)
        _print_json({"status": "failed", "error": str(exc)})
        return EXIT_FAILED

    parser.error(f"Unknown command '{args.command}'")
    return EXIT_FAILED


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gcs-release", description="Deploy a folder to labelled GCS buckets.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy = subparsers.add_parser("deploy", help="Upload a folder to every bucket matching the labels.")
    deploy.add_argument("--from-path", help="Folder path (relative to workspace root) to upload.")
    deploy.add_argument("--to-path", help="Path in each bucket to upload the folder to.")
    deploy.add_argument("--header", help="Header to set on every uploaded object.")
    deploy.add_argument("--labels", help="Comma-delimited key=value labels the buckets must carry.")
    deploy.add_argument("--public", action=argparse.BooleanOptionalAction, default=None)
    deploy.add_argument("--project-id")
    deploy.add_argument("--artifacts-name", help="Workflow artifacts to download before deploying.")
    deploy.add_argument("--service-account")
    deploy.add_argument("--workload-identity-provider")
    deploy.add_argument("--policy", choices=[policy.value for policy in FailurePolicy])
    deploy.add_argument("--summary-file", help="Markdown summary file (defaults to $GITHUB_STEP_SUMMARY).")
    deploy.add_argument("--config", help="YAML file of workflow inputs.")
    deploy.add_argument("--env-file", help=".env file consulted for inputs.")
    deploy.add_argument("--dry-run", action=argparse.BooleanOptionalAction, default=None)
    deploy.add_argument("--workspace-root")

    buckets = subparsers.add_parser("buckets", help="List buckets and whether they match the labels.")
    buckets.add_argument("--labels")
    buckets.add_argument("--project-id")

    inputs = subparsers.add_parser("inputs", help="Describe how each workflow input resolves.")
    inputs.add_argument("--env-file")
    inputs.add_argument("--workspace-root")

    return parser


def _handle_deploy(args: argparse.Namespace, workspace: Path) -> int:
    settings = build_settings(
        {
            "from-path": args.from_path,
            "to-path": args.to_path,
            "header": args.header,
            "labels": args.labels,
            "public": args.public,
            "project-id": args.project_id,
            "artifacts-name": args.artifacts_name,
            "service-account": args.service_account,
            "workload-identity-provider": args.workload_identity_provider,
            "policy": args.policy,
            "summary-path": args.summary_file,
            "dry-run": args.dry_run,
        },
        config_path=_resolve_path(args.config, workspace) if args.config else None,
        workspace_root=workspace,
    )

    storage = GsutilClient(dry_run=settings.dry_run)
    sink = StepSummary(settings.summary_path)
    fetcher = GitHubArtifactFetcher() if settings.artifacts_name else None

    try:
        result = run_release(settings, storage=storage, fetcher=fetcher, sink=sink)
    except ConfigurationError:
        raise
    except ReleaseError as exc:
        logger.error("Deployment aborted: %s", exc)
        _print_json(
            {
                "status": "failed",
                "error": str(exc),
                "summary": sink.lines,
                "logs": storage.logs,
            }
        )
        return EXIT_FAILED

    payload = result.to_dict()
    payload["status"] = "succeeded" if result.succeeded else "failed"
    payload["summary"] = sink.lines
    payload["logs"] = [*result.logs, *storage.logs]
    _print_json(payload)
    return 0 if result.succeeded else EXIT_FAILED


def _handle_buckets(args: argparse.Namespace) -> int:
    label_filter = LabelFilter.parse(args.labels)
    storage = GsutilClient()
    project_id = args.project_id or storage.infer_project()
    buckets = discover_buckets(storage, storage, project_id=project_id)
    _print_json(
        {
            "project_id": project_id,
            "labels": label_filter.to_string(),
            "buckets": [
                {"id": bucket.id, "labels": bucket.labels, "matches": label_filter.matches(bucket.labels)}
                for bucket in buckets
            ],
        }
    )
    return 0


def _handle_inputs() -> int:
    _print_json({"inputs": [describe_input(spec.name) for spec in list_inputs()]})
    return 0


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_workspace(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_path(value: str, workspace: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = workspace / path
    return path.resolve()


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
