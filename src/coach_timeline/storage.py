"""
Storage management for Coach Timeline.

PURPOSE: JSON snapshot of the sessions and challenges the dashboard reads.
AI CONTEXT: All persistence goes through this module; the timeline core
never touches files.

STORAGE STRUCTURE:
    .coach_timeline/
    ├── sessions.json      # List: session records with embedded attendance
    └── challenges.json    # List: timed challenge records

ERROR HANDLING STRATEGY:
- File not found: Return empty list
- JSON corruption: Log error, return empty list
- Invalid record: Log warning, skip the record, keep the rest
- Write failure: Log error, return False

USAGE:
    # Production
    storage = StorageManager()
    todays = storage.query_sessions(start=day_start, end=day_end)

    # Testing with MockFileSystem (tests/conftest.py)
    storage = StorageManager(storage_dir="/test", filesystem=mock_fs)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

from .config import Config
from .filesystem import RealFileSystem
from .models import Session, TimedChallenge

if TYPE_CHECKING:
    from .filesystem import FileSystem

__all__ = ["StorageManager"]

logger = logging.getLogger(__name__)

_Record = TypeVar("_Record", Session, TimedChallenge)


class StorageManager:
    """
    JSON file store for sessions and timed challenges.

    DESIGN PRINCIPLES:
    1. Fail-safe: I/O errors are logged, never raised to the web layer
    2. Predictable: Loads always return lists
    3. Lenient: One malformed record does not hide the others
    4. Testable: FileSystem can be injected for mocking

    THREAD SAFETY:
    Not thread-safe. Single writer assumed (admin CLI or one web process).
    """

    def __init__(
        self,
        storage_dir: str | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """
        Initialize storage and create missing files.

        Args:
            storage_dir: Custom storage path. Default: Config.get_storage_dir()
            filesystem: FileSystem implementation. Default: RealFileSystem

        Creates:
            - Storage directory
            - Empty sessions.json and challenges.json
        """
        self.storage_dir = storage_dir or Config.get_storage_dir()
        self._fs: FileSystem = filesystem or RealFileSystem()
        self.sessions_file = os.path.join(self.storage_dir, Config.SESSIONS_FILE)
        self.challenges_file = os.path.join(self.storage_dir, Config.CHALLENGES_FILE)

        self._initialize_storage()

    def _initialize_storage(self) -> None:
        """Create directory and empty files; logs instead of raising."""
        try:
            self._fs.makedirs(self.storage_dir, exist_ok=True)
            if not self._fs.exists(self.sessions_file):
                self._write_json(self.sessions_file, [])
            if not self._fs.exists(self.challenges_file):
                self._write_json(self.challenges_file, [])
            logger.info(f"Using data directory {self.storage_dir}")
        except OSError as e:
            logger.error(f"Could not prepare data directory {self.storage_dir}: {e}")

    def _read_json(self, file_path: str, default: Any) -> Any:
        """
        Read and decode a JSON file, never raising.

        Args:
            file_path: Path to JSON file
            default: Value to return on any error

        Returns:
            Parsed JSON data or default value.
        """
        try:
            content = self._fs.read_text(file_path)
            return json.loads(content)
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt JSON in {file_path}: {e}")
            return default
        except OSError as e:
            logger.error(f"Could not read {file_path}: {e}")
            return default

    def _write_json(self, file_path: str, data: Any) -> bool:
        """
        Encode and write a JSON file, never raising.

        Returns:
            True on success, False on failure.
        """
        try:
            content = json.dumps(data, indent=2, default=str)
            self._fs.write_text(file_path, content)
            return True
        except OSError as e:
            logger.error(f"Could not write {file_path}: {e}")
            return False

    def _load_records(
        self,
        file_path: str,
        parse: Callable[[dict[str, Any]], _Record],
    ) -> list[_Record]:
        """
        Load a JSON list and parse each entry, skipping invalid ones.

        Args:
            file_path: JSON file holding a list of records.
            parse: from_dict of the record type.

        Returns:
            Parsed records in file order.
        """
        raw = self._read_json(file_path, [])
        if not isinstance(raw, list):
            logger.error(f"Expected a list in {file_path}, got {type(raw).__name__}")
            return []

        records: list[_Record] = []
        for index, entry in enumerate(raw):
            try:
                records.append(parse(entry))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping invalid record {index} in {file_path}: {e!r}")
        return records

    # =========================================================================
    # SESSION OPERATIONS
    # =========================================================================

    def load_sessions(self) -> list[Session]:
        """
        Load all sessions.

        Returns:
            Sessions in file order. Empty list if unavailable.
        """
        return self._load_records(self.sessions_file, Session.from_dict)

    def save_sessions(self, sessions: list[Session]) -> bool:
        """
        Replace stored sessions.

        Returns:
            True on success.
        """
        return self._write_json(self.sessions_file, [s.to_dict() for s in sessions])

    def add_session(self, session: Session) -> bool:
        """
        Append a session, replacing any stored session with the same id.

        Args:
            session: Session to store.

        Returns:
            True on success.
        """
        sessions = [s for s in self.load_sessions() if s.id != session.id]
        sessions.append(session)
        return self.save_sessions(sessions)

    def query_sessions(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        kind: str | None = None,
    ) -> list[Session]:
        """
        Fetch sessions whose start falls in a range.

        Business context: The schedule screen fetches one day's sessions
        (start between 00:00 and 23:59:59.999999) and the attendance
        chart fetches one kind of class. Filtering on start instants
        matches how the schedule has always been queried: a session that
        began the previous evening is not part of today's fetch.

        Args:
            start: Inclusive lower bound on start_at. None for no bound.
            end: Inclusive upper bound on start_at. None for no bound.
            kind: SessionKind value to keep. None for all kinds.

        Returns:
            Matching sessions ordered by start_at ascending.

        Example:
            >>> lo, hi = day_bounds(date(2024, 1, 1))
            >>> storage.query_sessions(start=lo, end=hi)
        """
        result = [
            session
            for session in self.load_sessions()
            if (start is None or session.start_at >= start)
            and (end is None or session.start_at <= end)
            and (kind is None or session.kind == kind)
        ]
        result.sort(key=lambda s: s.start_at)
        return result

    # =========================================================================
    # CHALLENGE OPERATIONS
    # =========================================================================

    def load_challenges(self) -> list[TimedChallenge]:
        """
        Load all timed challenges.

        Returns:
            Challenges in file order. Empty list if unavailable.
        """
        return self._load_records(self.challenges_file, TimedChallenge.from_dict)

    def save_challenges(self, challenges: list[TimedChallenge]) -> bool:
        """Replace stored challenges. Returns True on success."""
        return self._write_json(self.challenges_file, [c.to_dict() for c in challenges])

    def add_challenge(self, challenge: TimedChallenge) -> bool:
        """
        Append a timed challenge, replacing any stored one with the same id.

        No overlap check happens here; callers use
        filters.find_conflicting_challenge() first.

        Returns:
            True on success.
        """
        challenges = [c for c in self.load_challenges() if c.id != challenge.id]
        challenges.append(challenge)
        return self.save_challenges(challenges)

    # =========================================================================
    # MAINTENANCE OPERATIONS
    # =========================================================================

    def clear_all(self) -> bool:
        """
        Reset all data files to empty lists.

        WARNING: Destroys all data. Use for testing or re-seeding.

        Returns:
            True if all clears succeeded.
        """
        success = True
        success &= self._write_json(self.sessions_file, [])
        success &= self._write_json(self.challenges_file, [])
        if success:
            logger.info("Sessions and challenges reset to empty")
        return success
