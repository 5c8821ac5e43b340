"""
Command line entry point for hamlet6to7
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from hamlet6to7 import __version__
from hamlet6to7.config import get_settings, override_settings
from hamlet6to7.migrator import MigrationReport, SyntaxMigrator
from hamlet6to7.utils import get_logger, setup_logging

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

BACKUP_WARNING = (
    "Files are rewritten in place and no backup is made. "
    "Make sure your project is under version control before running."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hamlet6to7",
        description=(
            "Convert .hamlet, .cassius and .julius files and quasi-quoted "
            "templates in .hs files from the 0.6 to the 0.7 syntax, in place."
        ),
        epilog=BACKUP_WARNING,
    )
    parser.add_argument("files", nargs="+", type=Path, metavar="FILE")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="report what would change without writing anything",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="override HAMLET6TO7_LOG_LEVEL",
    )
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        help="override HAMLET6TO7_LOG_FORMAT",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def render_report(report: MigrationReport, console: Console) -> None:
    """Print a per-file table followed by the totals."""
    table = Table(title="Dry run" if report.dry_run else None)
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Rewrites", justify="right")
    table.add_column("Error")

    for result in report.results:
        table.add_row(
            str(result.path),
            result.status.value,
            str(result.total_rewrites),
            result.error or "",
        )

    console.print(table)
    console.print(
        ", ".join(f"{count} {name}" for name, count in report.summary().items())
    )


async def run(paths: list[Path], logger: "BoundLogger") -> MigrationReport:
    """Migrate ``paths`` sequentially with the active settings."""
    settings = get_settings()
    logger.info(
        "Starting migration",
        version=__version__,
        files=len(paths),
        dry_run=settings.dry_run,
    )
    migrator = SyntaxMigrator(settings)
    return await migrator.migrate(paths)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, migrate the files and return the exit code."""
    args = build_parser().parse_args(argv)

    overrides = {
        key: value
        for key, value in (
            ("dry_run", args.dry_run),
            ("log_level", args.log_level),
            ("log_format", args.log_format),
        )
        if value is not None
    }

    with override_settings(**overrides):
        setup_logging()
        logger = get_logger("main")
        if not get_settings().dry_run:
            logger.warning(BACKUP_WARNING)

        try:
            report = asyncio.run(run(args.files, logger))
        except KeyboardInterrupt:
            logger.warning("Migration interrupted by user")
            return 130

    render_report(report, Console())
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
