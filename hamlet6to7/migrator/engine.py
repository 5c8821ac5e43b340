"""Per-file migration pipeline and the sequential batch driver"""

from collections import Counter
from collections.abc import Iterable
from pathlib import Path

from hamlet6to7.config import Settings, get_settings
from hamlet6to7.migrator.converters import converter_for_kind
from hamlet6to7.migrator.embedded import EmbeddedSourceRewriter
from hamlet6to7.migrator.errors import (
    MalformedMarkerError,
    MigrationError,
    UnreadableFileError,
    UnrecognizedFileKindError,
)
from hamlet6to7.migrator.file_operations import FileOperations
from hamlet6to7.migrator.models import (
    FileKind,
    FileResult,
    FileStatus,
    FileTask,
    MarkerKind,
    MigrationReport,
)
from hamlet6to7.utils.logger import LoggerMixin


class SyntaxMigrator(LoggerMixin):
    """Migrates Hamlet 0.6 templates and Haskell sources to 0.7 syntax.

    Files are processed one at a time, in the order given. A failure in one
    file is recorded in the report and never stops the batch.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        file_operations: FileOperations | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.file_operations = file_operations or FileOperations(
            encoding=self.settings.encoding,
            temp_suffix=self.settings.temp_suffix,
        )
        self.embedded_rewriter = EmbeddedSourceRewriter()

    def transform(self, kind: FileKind, content: str) -> tuple[str, Counter[MarkerKind]]:
        """Rewrite ``content`` in memory according to its file kind."""
        if not kind.is_template:
            return self.embedded_rewriter.rewrite(content)

        converted = converter_for_kind(kind).convert(content)
        counts: Counter[MarkerKind] = Counter()
        if converted != content:
            counts[MarkerKind.TEMPLATE_REWRITE] += 1
        return converted, counts

    async def migrate_file(self, path: Path | str) -> FileResult:
        """Read, transform and write back a single file."""
        path = Path(path)

        try:
            task = FileTask.from_path(path)
        except UnrecognizedFileKindError as e:
            self.logger.warning("Skipping file", file_path=str(path), error=e.message)
            return FileResult(path=path, status=FileStatus.SKIPPED, error=e.message)

        try:
            content = await self.file_operations.read_text(task.path)
        except UnreadableFileError as e:
            self.logger.warning("Skipping file", file_path=str(path), error=e.message)
            return FileResult(
                path=path, kind=task.kind, status=FileStatus.SKIPPED, error=e.message
            )

        try:
            migrated, counts = self.transform(task.kind, content)
        except MalformedMarkerError as e:
            self.logger.error(
                "Malformed marker, file left untouched",
                file_path=str(path),
                line=e.line,
                error=e.message,
            )
            return FileResult(
                path=path, kind=task.kind, status=FileStatus.FAILED, error=e.message
            )

        if migrated == content:
            self.logger.info("File already up to date", file_path=str(path))
            return FileResult(
                path=path,
                kind=task.kind,
                status=FileStatus.UNCHANGED,
                rewrites=dict(counts),
            )

        if not self.settings.dry_run:
            try:
                await self.file_operations.replace_text(task.path, migrated)
            except MigrationError as e:
                self.logger.error(
                    "Failed to write migrated file", file_path=str(path), error=e.message
                )
                return FileResult(
                    path=path, kind=task.kind, status=FileStatus.FAILED, error=e.message
                )

        self.logger.info(
            "File migrated",
            file_path=str(path),
            kind=task.kind.name,
            rewrites={kind.value: count for kind, count in counts.items()},
            dry_run=self.settings.dry_run,
        )
        return FileResult(
            path=path, kind=task.kind, status=FileStatus.MIGRATED, rewrites=dict(counts)
        )

    async def migrate(self, paths: Iterable[Path | str]) -> MigrationReport:
        """Migrate every path in order and collect the results."""
        report = MigrationReport(dry_run=self.settings.dry_run)
        for path in paths:
            report.add(await self.migrate_file(path))

        self.logger.info("Migration finished", **report.summary())
        return report
