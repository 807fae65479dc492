"""Command line entrypoint for RDS discovery."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from rds_discovery import __version__
from rds_discovery.config import DiscoveryConfig, load_settings
from rds_discovery.discovery import run_discovery
from rds_discovery.errors import DiscoveryError
from rds_discovery.logging_utils import configure_logging
from rds_discovery.output import write_document

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rds-discovery",
        description="Print a Zabbix low-level discovery document for RDS instances.",
    )
    parser.add_argument(
        "-r",
        "--region",
        required=True,
        help="AWS region to discover instances in, e.g. eu-central-1",
    )
    parser.add_argument(
        "-R",
        "--role",
        required=True,
        help="ARN of the IAM role to assume",
    )
    parser.add_argument(
        "-t",
        "--tags",
        default=None,
        help='JSON array of tags to match, e.g. \'[{"key": "env", "value": "prod"}]\'',
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        configure_logging()
        settings = load_settings()
        config = DiscoveryConfig.from_arguments(args.region, args.role, args.tags)
        document = run_discovery(config, settings)
        write_document(document)
    except DiscoveryError as exc:
        logger.debug("Discovery aborted (%s)", exc.code, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return 0


def run_entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
