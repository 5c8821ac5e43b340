"""Migration error taxonomy"""

from pathlib import Path


class MigrationError(Exception):
    """Base class for per-file migration failures"""

    def __init__(self, path: Path | str | None, message: str) -> None:
        self.path = Path(path) if path is not None else None
        self.message = message
        super().__init__(f"{self.path}: {message}" if self.path else message)


class UnreadableFileError(MigrationError):
    """The file could not be read or decoded"""


class UnrecognizedFileKindError(MigrationError):
    """The file extension is not one the migrator handles"""

    def __init__(self, path: Path | str) -> None:
        super().__init__(path, f"unrecognized file kind '{Path(path).suffix}'")


class MalformedMarkerError(MigrationError):
    """A legacy marker span could not be parsed, e.g. an unterminated block"""

    def __init__(self, path: Path | str | None, line: int, message: str) -> None:
        self.line = line
        super().__init__(path, f"line {line}: {message}")


class WriteBackError(MigrationError):
    """The rewritten content could not be written over the original"""
