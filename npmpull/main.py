"""
Command-line entry point: fetch the latest release of a package and unpack it.

    npmpull <package> [output_dir] [--registry URL] [--timeout SECONDS] [-v]
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from npmpull.core.dependencies import get_settings
from npmpull.domain.exceptions import NpmPullError
from npmpull.domain.models import ExtractionSummary, Settings
from npmpull.services.registry_client import RegistryClient, resolve_version
from npmpull.services.tarball_extractor import download_and_extract

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="npmpull",
        description="Download the latest published version of a package and extract it.",
    )
    parser.add_argument("package", help="Package name, e.g. 'express' or '@types/node'.")
    parser.add_argument(
        "output_dir",
        nargs="?",
        type=Path,
        help="Directory to extract into (default: $NPMPULL_OUTPUT_DIR or ./testing).",
    )
    parser.add_argument("--registry", help="Registry base URL (default: $NPMPULL_REGISTRY_URL or npmjs).")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


async def pull_package(
    package_name: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[str, ExtractionSummary]:
    """
    Resolve the 'latest' version of package_name and extract it into
    settings.output_dir. Returns the tarball URL and the extraction summary.
    """
    client = RegistryClient(settings.registry_url, timeout=settings.timeout, transport=transport)
    metadata = await client.fetch_package_metadata(package_name)
    record = resolve_version(metadata)

    summary = await download_and_extract(
        record.dist.tarball,
        settings.output_dir,
        timeout=settings.timeout,
        transport=transport,
    )
    return record.dist.tarball, summary


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    overrides = {}
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.registry:
        overrides["registry_url"] = args.registry
    if args.timeout is not None:
        overrides["timeout"] = args.timeout

    # pydantic.ValidationError is a ValueError.
    try:
        settings = Settings.model_validate({**get_settings().model_dump(), **overrides})
        tarball_url, summary = asyncio.run(pull_package(args.package, settings))
    except (NpmPullError, ValueError, OSError) as e:
        logger.debug("Pull failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if summary.skipped:
        logger.warning(f"{len(summary.skipped)} archive entries were not extracted")
    print(tarball_url)
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
