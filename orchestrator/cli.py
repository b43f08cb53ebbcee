from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid

from audit_log import AuditPolicy, build_audit_event, write_audit_events
from config_loader import load_catalog, load_packages, load_policy_table
from contracts.errors import ConfigLoadError
from enrichment import DeclaredLicenseDetector
from observability import add_logging_args, configure_logging

from .pipeline import EXIT_CONFIG_ERROR, PipelineOptions, run_pipeline

logger = logging.getLogger("orchestrator.cli")


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return n


def _positive_float(value: str) -> float:
    f = float(value)
    if f <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return f


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="license-inspector",
        description="Evaluate the licenses of project dependencies against a policy table.",
    )
    parser.add_argument("--packages", help="package manifest JSON (default: stdin)")
    parser.add_argument("--catalog", required=True, help="license catalog JSON")
    parser.add_argument("--policy", required=True, help="policy table JSON")
    parser.add_argument("--output", help="write the JSON report here instead of stdout")
    parser.add_argument("--audit-log", help="append one audit event per package to this JSONL file")
    parser.add_argument("--workers", type=_positive_int, default=4)
    parser.add_argument("--timeout", type=_positive_float, default=None, help="per-package detector timeout in seconds")
    parser.add_argument("--fail-on-error", action="store_true", default=None, help="also fail when a package could not be analyzed")
    add_logging_args(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, fmt=args.log_format)

    try:
        catalog = load_catalog(args.catalog)
        policies = load_policy_table(args.policy)
        packages, declared = load_packages(args.packages)
    except ConfigLoadError as e:
        logger.error("Configuration could not be loaded.", extra={"fields": e.as_log_fields()})
        print(f"license-inspector: {e.message}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    options = PipelineOptions(
        max_workers=args.workers,
        detector_timeout=args.timeout,
        fail_on_error=args.fail_on_error,
    )
    result = run_pipeline(packages, DeclaredLicenseDetector(declared), policies, catalog, options)

    if args.audit_log:
        run_id = str(uuid.uuid4())
        write_audit_events(args.audit_log, (build_audit_event(p, AuditPolicy(), run_id) for p in result.packages))

    report = json.dumps(result.to_dict(), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(report + "\n")
    else:
        print(report)

    return result.exit_code()


if __name__ == "__main__":
    raise SystemExit(main())
