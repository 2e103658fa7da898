"""nginx-digest: summarize HTTP errors from nginx access logs."""

import logging
import sys
from argparse import ArgumentParser

from nginx_digest.config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_CONFIG_NAME,
    ConfigLoadError,
    ConfigValidationError,
    DigestConfig,
    load_config,
)
from nginx_digest.filters import filter_by_window
from nginx_digest.formatter import RenderError, TemplateLoadError, load_template, render_report
from nginx_digest.parser import LogPattern, PatternCompileError, compile_format
from nginx_digest.reader import expand_paths, scan
from nginx_digest.report import ReportData, assemble_report
from nginx_digest.stats import rank_problems

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="nginx-digest",
        description=f"nginx-digest {VERSION}: rank the request URIs behind HTTP errors in nginx access logs.",
    )
    parser.add_argument(
        "-c", "--configuration",
        default=DEFAULT_CONFIG_NAME,
        help=f"Name of the configuration to use (default: {DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument(
        "-f", "--file",
        default=DEFAULT_CONFIG_FILE,
        help=f"YAML configuration file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress details to stderr",
    )
    return parser


def run_pipeline(config: DigestConfig, pattern: LogPattern) -> ReportData:
    """scan -> time window -> rank -> assemble."""
    paths = expand_paths(config.sources)
    logger.info("Scanning %d file(s) with configuration '%s'", len(paths), config.name)
    entries = scan(pattern, paths)
    windowed = filter_by_window(entries, config.window)
    problems = rank_problems(windowed, config.ranking)
    return assemble_report(windowed, problems, {**config.settings, "configuration": config.name})


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.file, args.configuration)
        pattern = compile_format(config.log_format)
        template = load_template(config.template)
    except (ConfigLoadError, ConfigValidationError, PatternCompileError, TemplateLoadError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    report = run_pipeline(config, pattern)

    try:
        output = render_report(template, report)
    except RenderError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0
