"""
Migration data models
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from hamlet6to7.migrator.errors import UnrecognizedFileKindError


class FileKind(Enum):
    """拡張子から判定するファイル種別"""

    HAMLET = ".hamlet"  # TemplateA
    CASSIUS = ".cassius"  # TemplateB
    JULIUS = ".julius"  # TemplateC
    HASKELL = ".hs"  # EmbeddedSource

    @classmethod
    def from_path(cls, path: Path) -> "FileKind":
        """Classify a path by its extension (case-sensitive)."""
        for kind in cls:
            if path.suffix == kind.value:
                return kind
        raise UnrecognizedFileKindError(path)

    @property
    def is_template(self) -> bool:
        return self is not FileKind.HASKELL


class MarkerKind(Enum):
    """書き換えルールの種類"""

    LEGACY_OPENER = "legacy_opener"  # [$hamlet|
    MACRO_OPENER = "macro_opener"  # [HAMLET|
    CONDITIONAL_GUARD = "conditional_guard"  # #if GHC7 ... #else ... #endif
    MACRO_CONDITIONAL = "macro_conditional"  # #define HAMLET hamlet guards
    TEMPLATE_REWRITE = "template_rewrite"  # whole .hamlet/.cassius/.julius file


class FileStatus(Enum):
    """ファイル単位の処理結果"""

    MIGRATED = "migrated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class MarkerPattern:
    """An immutable rewrite rule for one legacy marker form."""

    kind: MarkerKind
    pattern: re.Pattern[str]
    replacement: str


@dataclass(frozen=True)
class FileTask:
    """A file scheduled for migration"""

    path: Path
    kind: FileKind

    @classmethod
    def from_path(cls, path: Path | str) -> "FileTask":
        path = Path(path)
        return cls(path=path, kind=FileKind.from_path(path))


class FileResult(BaseModel):
    """Outcome of migrating a single file"""

    path: Path
    kind: FileKind | None = None
    status: FileStatus
    rewrites: dict[MarkerKind, int] = Field(default_factory=dict)
    error: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def total_rewrites(self) -> int:
        return sum(self.rewrites.values())

    @property
    def succeeded(self) -> bool:
        return self.status in (FileStatus.MIGRATED, FileStatus.UNCHANGED)


class MigrationReport(BaseModel):
    """Ordered results of a migration batch"""

    results: list[FileResult] = Field(default_factory=list)
    dry_run: bool = False

    def add(self, result: FileResult) -> None:
        self.results.append(result)

    def count(self, status: FileStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def migrated(self) -> int:
        return self.count(FileStatus.MIGRATED)

    @property
    def unchanged(self) -> int:
        return self.count(FileStatus.UNCHANGED)

    @property
    def skipped(self) -> int:
        return self.count(FileStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(FileStatus.FAILED)

    @property
    def exit_code(self) -> int:
        """0 when every file migrated or was already current, 1 otherwise."""
        return 0 if all(result.succeeded for result in self.results) else 1

    def summary(self) -> dict[str, int]:
        return {
            "migrated": self.migrated,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "failed": self.failed,
        }
