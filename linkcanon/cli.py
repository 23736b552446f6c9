"""CLI for cleaning and inspecting bookmark URLs.

Usage:
    # Print canonical URLs (tracking parameters removed)
    linkcanon clean "https://example.com/?utm_source=x&q=1"

    # Read URLs from stdin, one per line
    cat urls.txt | linkcanon clean

    # Show tracking parameters found in each URL
    linkcanon check URL1 URL2

    # Print dedup keys
    linkcanon key URL

    # Group duplicate URLs read from stdin
    cat urls.txt | linkcanon duplicates

    # Emit one JSON object per URL instead of plain text
    linkcanon clean --json URL

    # Use the extended denylist but keep YouTube's "t" timestamp
    linkcanon clean --preset extended --keep t URL

Denylist defaults come from LINKCANON_TRACKING_PRESET,
LINKCANON_EXTRA_PARAMETERS and LINKCANON_PRESERVED_PARAMETERS.
"""

import argparse
import json
import sys
from collections.abc import Iterable, Iterator
from dataclasses import replace
from typing import TextIO

from linkcanon.canonicalizer import UrlCanonicalizer
from linkcanon.config import get_config
from linkcanon.dedup import dedup_key, find_duplicates
from linkcanon.errors import InvalidUrlError
from linkcanon.logging import configure_logging, get_logger
from linkcanon.models import DedupKeyResult, TrackingParametersResult, inspect_url

logger = get_logger(__name__)


def _read_urls(urls: list[str], stdin: TextIO) -> Iterator[str]:
    """Yield URLs from arguments, or from stdin lines when none are given."""
    if urls:
        yield from urls
        return
    for line in stdin:
        line = line.strip()
        if line and not line.startswith("#"):
            yield line


def build_canonicalizer(args: argparse.Namespace) -> UrlCanonicalizer:
    """
    Build a canonicalizer from config, overridden by CLI flags.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed arguments with ``preset``, ``strip`` and ``keep``.

    Returns
    -------
    UrlCanonicalizer
        Canonicalizer using the resulting policy.
    """
    config = get_config()
    overridden = replace(
        config,
        tracking_preset=args.preset if args.preset is not None else config.tracking_preset,
        extra_parameters=(*config.extra_parameters, *(args.strip or [])),
        preserved_parameters=(*config.preserved_parameters, *(args.keep or [])),
    )
    return UrlCanonicalizer(overridden.build_policy())


def run_clean(
    canonicalizer: UrlCanonicalizer, urls: Iterable[str], as_json: bool, out: TextIO
) -> int:
    """Print the canonical form of each URL. Returns the number of invalid URLs."""
    failures = 0
    for url in urls:
        try:
            if as_json:
                result = inspect_url(url, canonicalizer)
                out.write(result.model_dump_json(by_alias=True) + "\n")
                continue
            canonical, removed = canonicalizer.strip_tracking_parameters(url)
            if removed:
                logger.debug("Stripped tracking parameters", url=url, removed=removed)
            out.write(canonical + "\n")
        except InvalidUrlError as e:
            failures += 1
            logger.error("Invalid URL", url=url, reason=e.reason)
    return failures


def run_check(
    canonicalizer: UrlCanonicalizer, urls: Iterable[str], as_json: bool, out: TextIO
) -> int:
    """Print tracking parameters per URL. Returns the number of invalid URLs."""
    failures = 0
    for url in urls:
        if not canonicalizer.is_valid_url(url):
            failures += 1
            logger.error("Invalid URL", url=url)
            continue
        found = canonicalizer.list_tracking_parameters(url)
        if as_json:
            result = TrackingParametersResult(url=url, tracking_parameters=found)
            out.write(result.model_dump_json(by_alias=True) + "\n")
        elif found:
            out.write(f"{url}\n  tracking: {', '.join(found)}\n")
        else:
            out.write(f"{url}\n  clean\n")
    return failures


def run_key(
    canonicalizer: UrlCanonicalizer, urls: Iterable[str], as_json: bool, out: TextIO
) -> int:
    """Print the dedup key of each URL. Returns the number of invalid URLs."""
    failures = 0
    for url in urls:
        try:
            key = dedup_key(url, canonicalizer)
        except InvalidUrlError as e:
            failures += 1
            logger.error("Invalid URL", url=url, reason=e.reason)
            continue
        if as_json:
            result = DedupKeyResult(url=url, dedup_key=key)
            out.write(result.model_dump_json(by_alias=True) + "\n")
        else:
            out.write(key + "\n")
    return failures


def run_duplicates(
    canonicalizer: UrlCanonicalizer, urls: Iterable[str], as_json: bool, out: TextIO
) -> int:
    """Print groups of URLs sharing a dedup key. Returns the number of invalid URLs."""
    urls = list(urls)
    # find_duplicates logs and skips these; count them for the exit code
    failures = sum(1 for url in urls if not canonicalizer.is_valid_url(url))
    groups = find_duplicates(urls, canonicalizer)
    if as_json:
        out.write(json.dumps(groups, indent=2) + "\n")
        return failures
    if not groups:
        logger.info("No duplicates found")
        return failures
    for key, members in groups.items():
        out.write(f"{key}\n")
        for url in members:
            out.write(f"  {url}\n")
    return failures


COMMANDS = {
    "clean": run_clean,
    "check": run_check,
    "key": run_key,
    "duplicates": run_duplicates,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="linkcanon", description="Remove tracking parameters from bookmark URLs"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of plain text",
    )
    common.add_argument(
        "--preset",
        choices=["default", "extended"],
        default=None,
        help="Tracking parameter preset (overrides LINKCANON_TRACKING_PRESET)",
    )
    common.add_argument(
        "--strip",
        action="append",
        metavar="NAME",
        help="Additional parameter to strip (repeatable)",
    )
    common.add_argument(
        "--keep",
        action="append",
        metavar="NAME",
        help="Parameter to keep even if denylisted (repeatable)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log removed parameters",
    )

    for name, help_text in [
        ("clean", "Print canonical URLs"),
        ("check", "Show tracking parameters found in URLs"),
        ("key", "Print deduplication keys"),
    ]:
        sub = subparsers.add_parser(name, parents=[common], help=help_text)
        sub.add_argument("urls", nargs="*", metavar="URL", help="URLs (default: read stdin)")

    subparsers.add_parser(
        "duplicates", parents=[common], help="Group duplicate URLs read from stdin"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    configure_logging(
        json_logs=config.log_json,
        log_level="DEBUG" if args.verbose else config.log_level,
        component="cli",
    )

    try:
        canonicalizer = build_canonicalizer(args)
    except ValueError as e:
        parser.error(str(e))

    urls = _read_urls(getattr(args, "urls", []), sys.stdin)
    failures = COMMANDS[args.command](canonicalizer, urls, args.json, sys.stdout)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
