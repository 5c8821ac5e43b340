"""Test migration data models"""

from pathlib import Path

import pytest

from hamlet6to7.migrator.errors import UnrecognizedFileKindError
from hamlet6to7.migrator.models import (
    FileKind,
    FileResult,
    FileStatus,
    FileTask,
    MarkerKind,
    MigrationReport,
)


class TestFileKind:
    """Test extension based classification"""

    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("templates/homepage.hamlet", FileKind.HAMLET),
            ("templates/default-layout.cassius", FileKind.CASSIUS),
            ("templates/homepage.julius", FileKind.JULIUS),
            ("Handler/Root.hs", FileKind.HASKELL),
        ],
    )
    def test_from_path(self, name: str, kind: FileKind) -> None:
        assert FileKind.from_path(Path(name)) is kind

    @pytest.mark.parametrize("name", ["Main.lhs", "page.HAMLET", "README", "a.hs.bak"])
    def test_unrecognized(self, name: str) -> None:
        with pytest.raises(UnrecognizedFileKindError):
            FileKind.from_path(Path(name))

    def test_is_template(self) -> None:
        assert FileKind.HAMLET.is_template
        assert not FileKind.HASKELL.is_template


def test_file_task_from_string_path() -> None:
    task = FileTask.from_path("Handler/Root.hs")
    assert task.path == Path("Handler/Root.hs")
    assert task.kind is FileKind.HASKELL


class TestMigrationReport:
    """Test batch report counters"""

    def test_counts_and_exit_code(self) -> None:
        report = MigrationReport()
        report.add(
            FileResult(
                path=Path("a.hamlet"),
                kind=FileKind.HAMLET,
                status=FileStatus.MIGRATED,
                rewrites={MarkerKind.TEMPLATE_REWRITE: 1},
            )
        )
        report.add(FileResult(path=Path("b.hs"), status=FileStatus.UNCHANGED))
        assert report.exit_code == 0

        report.add(
            FileResult(path=Path("c.txt"), status=FileStatus.SKIPPED, error="nope")
        )
        assert report.summary() == {
            "migrated": 1,
            "unchanged": 1,
            "skipped": 1,
            "failed": 0,
        }
        assert report.exit_code == 1

    def test_empty_report_succeeds(self) -> None:
        assert MigrationReport().exit_code == 0

    def test_total_rewrites(self) -> None:
        result = FileResult(
            path=Path("x.hs"),
            status=FileStatus.MIGRATED,
            rewrites={MarkerKind.LEGACY_OPENER: 2, MarkerKind.CONDITIONAL_GUARD: 1},
        )
        assert result.total_rewrites == 3
        assert result.succeeded
