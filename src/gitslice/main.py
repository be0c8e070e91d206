"""Main CLI entry point for gitslice."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .config import SliceConfig
from .errors import GitSliceError
from .logging_utils import configure_logging
from .settings import get_default_max_workers, get_default_output_path
from .slicer import create_slice
from .vcs import parse_branch_range

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="gitslice",
        description="Package git commit or branch changes into a single XML file "
        "for code analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gitslice --commit abc123
  gitslice --branch-compare main..feature -o feature.xml
  gitslice -c HEAD -d /path/to/repo --workers 4
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Change set selection
    parser.add_argument(
        "-c",
        "--commit",
        help="Git commit hash to analyze",
    )
    parser.add_argument(
        "-b",
        "--branch-compare",
        help="Compare branches (format: source..target)",
    )

    # Optional arguments
    parser.add_argument(
        "-o",
        "--output",
        default=get_default_output_path(),
        help="Output XML file path (default: git-diff-xml-output.xml)",
    )
    parser.add_argument(
        "-d",
        "--dir",
        default=os.getcwd(),
        help="Git repository directory (default: current directory)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=get_default_max_workers(),
        help="Number of files fetched concurrently (default: 8)",
    )
    parser.add_argument(
        "--strict-hunk-headers",
        action="store_true",
        help="Treat a malformed hunk header as a failure for that file",
    )
    parser.add_argument(
        "--split-cdata",
        action="store_true",
        help="Split file content on ']]>' so the output stays well-formed",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (default: LOG_LEVEL env or WARNING)",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command line arguments."""
    if args.commit and args.branch_compare:
        raise ValueError("--commit and --branch-compare are mutually exclusive")
    if not args.commit and not args.branch_compare:
        raise ValueError("Either --commit or --branch-compare option is required")
    if args.branch_compare:
        parse_branch_range(args.branch_compare)
    if args.workers <= 0:
        raise ValueError("--workers must be positive")


def create_config(args: argparse.Namespace) -> SliceConfig:
    """Create configuration from command line arguments."""
    return SliceConfig(
        repo_path=os.path.abspath(args.dir),
        commit=args.commit,
        branch_range=args.branch_compare,
        output_path=args.output,
        split_cdata=args.split_cdata,
        strict_hunk_headers=args.strict_hunk_headers,
        max_workers=args.workers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        validate_args(args)
        config = create_config(args)
        output_path = create_slice(config)

    except (ValueError, GitSliceError) as e:
        message = e.message if isinstance(e, GitSliceError) else str(e)
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {message}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.exception("Unexpected error")
        print(f"Error: Internal error: {e}", file=sys.stderr)
        return 1

    if config.commit:
        print(f"Successfully created XML slice at {output_path}")
    else:
        print(f"Successfully created branch comparison XML at {output_path}")
    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
