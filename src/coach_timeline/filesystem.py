"""
FileSystem abstraction for Coach Timeline.

PURPOSE: Injectable file access so the JSON store can be tested in memory.

DESIGN:
- Protocol lists only the four calls StorageManager makes
- RealFileSystem delegates to os and open()
- MockFileSystem in tests/conftest.py keeps files in a dict
"""

from __future__ import annotations

import os
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    File operations used by the storage layer.

    Paths are plain strings. RealFileSystem serves production,
    MockFileSystem serves tests.
    """

    def exists(self, path: str) -> bool:
        """
        Report whether a file or directory is present.

        Business context: StorageManager only writes an empty data file
        when none exists yet, so a restart never wipes the schedule.

        Returns:
            True when present. Never raises.
        """
        ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create the storage directory along with any missing parents.

        Raises:
            OSError: When the directory is already there and exist_ok
                is False.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Return the whole file as a string.

        Raises:
            FileNotFoundError: When nothing is stored at path.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Replace the file's contents.

        Raises:
            PermissionError: When the file cannot be written.
        """
        ...


class RealFileSystem:
    """Disk-backed FileSystem used outside tests."""

    def exists(self, path: str) -> bool:  # pragma: no cover
        return os.path.exists(path)

    def makedirs(self, path: str, exist_ok: bool = False) -> None:  # pragma: no cover
        os.makedirs(path, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:  # pragma: no cover
        with open(path, encoding=encoding) as fh:
            return fh.read()

    def write_text(
        self, path: str, content: str, encoding: str = "utf-8"
    ) -> None:  # pragma: no cover
        with open(path, "w", encoding=encoding) as fh:
            fh.write(content)
