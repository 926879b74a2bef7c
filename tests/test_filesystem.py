"""Tests for the filesystem abstraction and its in-memory test double."""

from __future__ import annotations

from pathlib import Path

import pytest

from coach_timeline.filesystem import RealFileSystem
from conftest import MockFileSystem


class TestMockFileSystem:
    """Tests for MockFileSystem behavior the storage tests rely on.

    Categories:
    1. Directories (3 tests)
    2. Files (3 tests)
    3. Read-only simulation (1 test)
    """

    def test_makedirs_creates_parents(self, mock_fs: MockFileSystem) -> None:
        mock_fs.makedirs("/a/b/c")
        assert mock_fs.is_dir("/a")
        assert mock_fs.is_dir("/a/b")
        assert mock_fs.is_dir("/a/b/c")

    def test_makedirs_exist_ok_false_raises(self, mock_fs: MockFileSystem) -> None:
        mock_fs.makedirs("/data")
        with pytest.raises(OSError):
            mock_fs.makedirs("/data")
        mock_fs.makedirs("/data", exist_ok=True)

    def test_makedirs_raises_if_path_is_file(self, mock_fs: MockFileSystem) -> None:
        mock_fs.set_file("/data/sessions.json", "[]")
        with pytest.raises(OSError):
            mock_fs.makedirs("/data/sessions.json", exist_ok=True)

    def test_write_then_read(self, mock_fs: MockFileSystem) -> None:
        mock_fs.write_text("/store/sessions.json", "[1]")
        assert mock_fs.read_text("/store/sessions.json") == "[1]"
        assert mock_fs.is_dir("/store")
        assert mock_fs.list_files() == ["/store/sessions.json"]

    def test_read_missing_raises(self, mock_fs: MockFileSystem) -> None:
        with pytest.raises(FileNotFoundError):
            mock_fs.read_text("/missing.json")

    def test_get_file_returns_none_for_missing(self, mock_fs: MockFileSystem) -> None:
        assert mock_fs.get_file("/missing.json") is None

    def test_read_only_blocks_write(self, mock_fs: MockFileSystem) -> None:
        """Verifies read-only paths reject writes until released.

        Business context:
        Storage write-failure handling is tested by marking a data file
        read-only; the double must raise the same error as a real disk.

        Arrangement:
        A file marked read-only.

        Action:
        Write, then clear the flag and write again.

        Assertion Strategy:
        First write raises PermissionError and keeps old content; the
        second succeeds.
        """
        mock_fs.set_file("/store/challenges.json", "[]")
        mock_fs.set_read_only("/store/challenges.json")
        with pytest.raises(PermissionError):
            mock_fs.write_text("/store/challenges.json", "[{}]")
        assert mock_fs.get_file("/store/challenges.json") == "[]"

        mock_fs.set_read_only("/store/challenges.json", read_only=False)
        mock_fs.write_text("/store/challenges.json", "[{}]")
        assert mock_fs.get_file("/store/challenges.json") == "[{}]"


class TestRealFileSystem:
    """Tests for RealFileSystem against a temporary directory."""

    def test_round_trip_in_tmp_path(self, tmp_path: Path) -> None:
        fs = RealFileSystem()
        target_dir = str(tmp_path / "nested" / "store")
        fs.makedirs(target_dir, exist_ok=True)
        path = str(tmp_path / "nested" / "store" / "sessions.json")

        assert not fs.exists(path)
        fs.write_text(path, '[{"id": "a1"}]')
        assert fs.exists(path)
        assert fs.read_text(path) == '[{"id": "a1"}]'
