"""CLI entrypoint for site-email-finder."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from .config import DEFAULT_GLOBAL_TIMEOUT, DEFAULT_WORKERS, FinderConfig, PipelineConfig
from .errors import ConfigError, RenderError
from .logging_utils import configure_logging, get_logger
from .models import Target
from .pipeline import run_finder
from .validation import load_lines_from_file


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Site Email Finder - find a business contact email from its website."
    )
    source_group = parser.add_mutually_exclusive_group(required=False)
    source_group.add_argument("--websites", nargs="+", help="Website root URLs.")
    source_group.add_argument(
        "--websites-file", help="Path to website file (one URL per line)."
    )
    parser.add_argument(
        "--use-selenium",
        action="store_true",
        help="Render pages with headless Chrome when static fetches find nothing.",
    )
    parser.add_argument(
        "--workers", type=int, default=DEFAULT_WORKERS, help="Number of worker threads."
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_GLOBAL_TIMEOUT,
        help="Time budget in seconds for each website.",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bars.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and pre-validate CLI input."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not (args.websites or args.websites_file):
        parser.error("Provide --websites or --websites-file.")
    return args


def _materialize_websites(args: argparse.Namespace) -> tuple[str, ...]:
    if args.websites:
        return tuple(args.websites)
    return tuple(load_lines_from_file(args.websites_file))


def namespace_to_config(args: argparse.Namespace) -> FinderConfig:
    """Convert CLI args to validated FinderConfig."""
    return FinderConfig(
        websites=_materialize_websites(args),
        pipeline=PipelineConfig(global_timeout=args.timeout),
        workers=args.workers,
        use_selenium=args.use_selenium,
        show_progress=not args.no_progress,
    )


def format_target(target: Target) -> str:
    """One tab-separated result line: website, status, source, emails."""
    return "\t".join(
        [target.website, target.email_status, target.email_source, ";".join(target.emails)]
    )


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    logger = get_logger()
    try:
        config = namespace_to_config(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    try:
        targets = run_finder(config, logger=logger)
    except RenderError as exc:
        logger.error("Browser rendering unavailable: %s", exc)
        return 1
    for target in targets:
        print(format_target(target))
    found = sum(1 for target in targets if target.emails)
    logger.info("Found emails for %d of %d websites", found, len(targets))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
