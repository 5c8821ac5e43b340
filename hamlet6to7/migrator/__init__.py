"""Syntax migrator for Hamlet, Cassius and Julius 0.6 templates"""

from .converters import (
    CassiusConverter,
    HamletConverter,
    JuliusConverter,
    TemplateConverter,
    converter_for_kind,
    convert_reference,
    get_converter,
)
from .embedded import MARKER_PATTERNS, EmbeddedSourceRewriter
from .engine import SyntaxMigrator
from .errors import (
    MalformedMarkerError,
    MigrationError,
    UnreadableFileError,
    UnrecognizedFileKindError,
    WriteBackError,
)
from .file_operations import FileOperations
from .models import (
    FileKind,
    FileResult,
    FileStatus,
    FileTask,
    MarkerKind,
    MarkerPattern,
    MigrationReport,
)

__all__ = [
    "CassiusConverter",
    "HamletConverter",
    "JuliusConverter",
    "TemplateConverter",
    "converter_for_kind",
    "convert_reference",
    "get_converter",
    "MARKER_PATTERNS",
    "EmbeddedSourceRewriter",
    "SyntaxMigrator",
    "MigrationError",
    "MalformedMarkerError",
    "UnreadableFileError",
    "UnrecognizedFileKindError",
    "WriteBackError",
    "FileOperations",
    "FileKind",
    "FileResult",
    "FileStatus",
    "FileTask",
    "MarkerKind",
    "MarkerPattern",
    "MigrationReport",
]
