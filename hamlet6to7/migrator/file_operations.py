"""File I/O for the migrator: full reads and all-or-nothing write-back."""

import os
import stat
from pathlib import Path

import aiofiles
import aiofiles.os

from hamlet6to7.migrator.errors import UnreadableFileError, WriteBackError
from hamlet6to7.utils.error_handler import safe_operation, safe_with_default
from hamlet6to7.utils.logger import LoggerMixin


class FileOperations(LoggerMixin):
    """Reads and atomically replaces template and source files.

    Content is read and written with newline translation disabled so line
    endings survive untouched.
    """

    def __init__(
        self, encoding: str = "utf-8", temp_suffix: str = ".hamlet6to7.tmp"
    ) -> None:
        self.encoding = encoding
        self.temp_suffix = temp_suffix

    def temp_path_for(self, path: Path) -> Path:
        return path.with_name(f".{path.name}{self.temp_suffix}")

    async def read_text(self, path: Path) -> str:
        """Read the whole file, raising ``UnreadableFileError`` on failure."""
        try:
            async with aiofiles.open(path, encoding=self.encoding, newline="") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise UnreadableFileError(path, str(e)) from e

    async def replace_text(self, path: Path, content: str) -> None:
        """Replace ``path`` with ``content`` or leave it untouched.

        The new content goes to a sibling temporary file which is then renamed
        over the original, so a failure at any point keeps the old file intact.
        Symlinks are followed so the link itself stays in place.
        """
        target = Path(os.path.realpath(path))
        temp_path = self.temp_path_for(target)
        try:
            original_mode = (await aiofiles.os.stat(target)).st_mode

            async with aiofiles.open(
                temp_path, "w", encoding=self.encoding, newline=""
            ) as f:
                await f.write(content)

            self._copy_mode(temp_path, original_mode)
            await aiofiles.os.replace(temp_path, target)

        except (OSError, UnicodeEncodeError) as e:
            await self._discard_temp(temp_path)
            raise WriteBackError(path, str(e)) from e

        self.logger.debug("File replaced", file_path=str(path), size=len(content))

    @safe_with_default("copy file mode", False)
    def _copy_mode(self, temp_path: Path, mode: int) -> bool:
        os.chmod(temp_path, stat.S_IMODE(mode))
        return True

    @safe_operation("discard temporary file")
    async def _discard_temp(self, temp_path: Path) -> None:
        if await aiofiles.os.path.exists(temp_path):
            await aiofiles.os.remove(temp_path)
