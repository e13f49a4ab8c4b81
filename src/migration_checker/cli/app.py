"""Command-line interface implementation for the migration checker."""

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Sequence

from ..adapters import ClusterClient, ClusterClientError
from ..adapters.cluster_client import DEFAULT_TIMEOUT, DEFAULT_URL
from ..models import Severity
from ..normalization import NodeNormalizationError
from ..reporting import ReportCollector
from ..rules import ManifestSettingsCatalog, SettingsManifestError
from ..service import MigrationService

FAIL_ON_CHOICES = [Severity.WARN.value, Severity.CRITICAL.value]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(
        prog="es-migration",
        description="Check a running cluster's node configuration for upgrade blockers.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging verbosity for diagnostics written to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser(
        "check", help="Evaluate every node against the migration rules."
    )
    check_parser.add_argument(
        "--url",
        default=os.getenv("ES_URL", DEFAULT_URL),
        help="Base URL of the cluster. Defaults to $ES_URL or http://localhost:9200.",
    )
    check_parser.add_argument(
        "--user",
        default=os.getenv("ES_USER"),
        help="Username for basic authentication. Defaults to $ES_USER.",
    )
    check_parser.add_argument(
        "--password",
        default=os.getenv("ES_PASSWORD"),
        help="Password for basic authentication. Defaults to $ES_PASSWORD.",
    )
    check_parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Request timeout in seconds.",
    )
    check_parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification.",
    )
    check_parser.add_argument(
        "--settings-manifest",
        dest="settings_manifests",
        action="append",
        default=None,
        help="Additional YAML manifest of removed, renamed and known settings.",
    )
    check_parser.add_argument(
        "--fail-on",
        choices=FAIL_ON_CHOICES,
        default=Severity.CRITICAL.value,
        help="Exit with status 1 when the cluster result is at or above this severity.",
    )
    check_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format for the report.",
    )
    check_parser.add_argument(
        "--verbose",
        action="store_true",
        help="List passing rules as well as failing ones in text output.",
    )

    return parser


def create_service(
    *,
    url: str,
    auth: tuple[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    verify: bool = True,
    settings_manifests: Sequence[str] | None = None,
) -> MigrationService:
    """Create a migration service backed by the HTTP client and manifest catalog."""

    client = ClusterClient(url, auth=auth, timeout=timeout, verify=verify)
    catalog = ManifestSettingsCatalog.from_manifests(settings_manifests)
    return MigrationService(client, settings_catalog=catalog, reporter=ReportCollector())


def _format_report(
    report: ReportCollector,
    severity: Severity,
    *,
    fail_on: Severity,
    output_format: str,
    verbose: bool = False,
) -> tuple[str, bool]:
    if output_format not in {"text", "json"}:
        raise ValueError("format must be either 'text' or 'json'")

    should_fail = severity.rank >= fail_on.rank

    if output_format == "json":
        output = json.dumps(report.to_dict(), indent=2)
    else:
        output = report.render_text(verbose=verbose)

    return output, should_fail


def _handle_check(args: argparse.Namespace) -> int:
    auth = (args.user, args.password or "") if args.user else None

    try:
        service = create_service(
            url=args.url,
            auth=auth,
            timeout=args.timeout,
            verify=not args.insecure,
            settings_manifests=args.settings_manifests,
        )
        severity = service.run()
    except (ClusterClientError, NodeNormalizationError, SettingsManifestError) as exc:
        print(f"Error: {exc}")
        return 2

    output, should_fail = _format_report(
        service.reporter,
        severity,
        fail_on=Severity(args.fail_on),
        output_format=args.format,
        verbose=args.verbose,
    )

    print(output)
    return 1 if should_fail else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by tests and the console script."""

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "check":
        return _handle_check(args)

    parser.print_help()
    return 0


def run() -> None:  # pragma: no cover - thin wrapper for module execution
    """Execute the CLI and exit with the produced status code."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - module execution guard
    run()
