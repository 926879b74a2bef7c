"""
Pytest configuration and shared fixtures for Coach Timeline tests.

This module contains:
- MockFileSystem: dict-backed stand-in for the storage directory
- attendee(), make_session and make_challenge builders
- storage fixture rooted at /test/storage
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from datetime import date, datetime
from typing import Any

import pytest

from coach_timeline.config import Config
from coach_timeline.models import (
    AttendanceRecord,
    AttendanceStatus,
    AttendeeProfile,
    Session,
    SessionKind,
    TimedChallenge,
)
from coach_timeline.storage import StorageManager


class MockFileSystem:
    """
    Dict-backed FileSystem for storage tests.

    STATE:
    - _files: path -> JSON text
    - _dirs: known directories
    - _read_only: paths whose writes fail with PermissionError
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()

    def exists(self, path: str) -> bool:
        """
        True for any stored file or directory.

        Example:
            >>> fs = MockFileSystem()
            >>> fs.set_file('/data/sessions.json', '[]')
            >>> fs.exists('/data/sessions.json')
            True
        """
        return path in self._files or path in self._dirs

    def is_file(self, path: str) -> bool:
        return path in self._files

    def is_dir(self, path: str) -> bool:
        return path in self._dirs

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Record the directory and each of its parents.

        Raises:
            OSError: If directory exists and exist_ok is False, or the
                path is a file.
        """
        if path in self._dirs:
            if not exist_ok:
                raise OSError(f"Already a directory: {path}")
            return
        if path in self._files:
            raise OSError(f"Cannot create directory over file: {path}")

        parts = path.split(os.sep)
        for i in range(1, len(parts) + 1):
            parent = os.sep.join(parts[:i])
            if parent:
                self._dirs.add(parent)

    def read_text(self, path: str, _encoding: str = "utf-8") -> str:
        """
        Read mock file content.

        Raises:
            FileNotFoundError: If path is not a mock file.
        """
        if path not in self._files:
            raise FileNotFoundError(f"Nothing stored at {path}")
        return self._files[path]

    def write_text(self, path: str, content: str, _encoding: str = "utf-8") -> None:
        """
        Write mock file content, creating the parent directory.

        Raises:
            PermissionError: If path was marked read-only.
        """
        if path in self._read_only:
            raise PermissionError(f"Read-only: {path}")
        parent = os.path.dirname(path)
        if parent and parent not in self._dirs:
            self.makedirs(parent, exist_ok=True)
        self._files[path] = content

    # Test helpers

    def set_file(self, path: str, content: str) -> None:
        """Place a file directly, bypassing read-only checks."""
        parent = os.path.dirname(path)
        if parent:
            self.makedirs(parent, exist_ok=True)
        self._files[path] = content

    def get_file(self, path: str) -> str | None:
        return self._files.get(path)

    def set_read_only(self, path: str, read_only: bool = True) -> None:
        if read_only:
            self._read_only.add(path)
        else:
            self._read_only.discard(path)

    def list_files(self) -> list[str]:
        """Sorted list of all file paths."""
        return sorted(self._files.keys())


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """
    Empty in-memory filesystem, new for every test.

    Returns:
        MockFileSystem with no files or directories.
    """
    return MockFileSystem()


@pytest.fixture
def storage(mock_fs: MockFileSystem) -> StorageManager:
    """
    Create a StorageManager backed by the mock filesystem.

    Returns:
        StorageManager rooted at /test/storage with empty data files.
    """
    return StorageManager(storage_dir="/test/storage", filesystem=mock_fs)


@pytest.fixture(autouse=True)
def reset_config_overrides() -> Iterator[None]:
    """Clear Config test overrides after every test."""
    yield
    Config.reset_test_overrides()


def attendee(
    user_id: str,
    status: str = AttendanceStatus.ATTENDING,
    first_name: str | None = None,
    last_name: str | None = None,
) -> AttendanceRecord:
    """Build an attendance record, with a profile when a name is given."""
    profile = None
    if first_name is not None or last_name is not None:
        profile = AttendeeProfile(first_name=first_name, last_name=last_name)
    return AttendanceRecord(user_id=user_id, status=status, profile=profile)


@pytest.fixture
def make_session() -> Callable[..., Session]:
    """
    Factory for Session objects with sensible defaults.

    Args accepted by the returned callable:
        start: Start instant (required).
        end: End instant, or None for the default duration.
        session_id: Defaults to a counter-based id.
        title: Defaults to "Circuits".
        kind: Defaults to SessionKind.GROUP.
        attending: Number of attending records to add.
        attendance: Explicit attendance records (overrides attending).

    Example:
        >>> s = make_session(datetime(2024, 1, 1, 9), attending=3)
        >>> s.attending_count
        3
    """
    counter = {"n": 0}

    def factory(
        start: datetime,
        end: datetime | None = None,
        *,
        session_id: str | None = None,
        title: str = "Circuits",
        kind: str = SessionKind.GROUP,
        attending: int = 0,
        attendance: list[AttendanceRecord] | None = None,
        **extra: Any,
    ) -> Session:
        counter["n"] += 1
        records = attendance
        if records is None:
            records = [attendee(f"u{i}") for i in range(attending)]
        return Session(
            id=session_id or f"s{counter['n']}",
            title=title,
            start_at=start,
            end_at=end,
            kind=kind,
            attendance=records,
            **extra,
        )

    return factory


@pytest.fixture
def make_challenge() -> Callable[..., TimedChallenge]:
    """Factory for TimedChallenge objects spanning whole days."""
    counter = {"n": 0}

    def factory(
        start: date,
        end: date,
        *,
        challenge_id: str | None = None,
        title: str = "Row 2k",
        challenge_type: str = "time",
    ) -> TimedChallenge:
        counter["n"] += 1
        return TimedChallenge(
            id=challenge_id or f"c{counter['n']}",
            title=title,
            start_date=start,
            end_date=end,
            challenge_type=challenge_type,
        )

    return factory
