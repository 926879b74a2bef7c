"""
Configuration for Coach Timeline.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Storage: File paths and directory structure
- Day Grid: Hour window and pixel scale of the timeline view
- Sessions: Defaults applied to session records
- Analytics: Output precision for attendance summaries

ENVIRONMENT VARIABLES:
- COACH_TIMELINE_STORAGE_DIR: Storage directory (default: .coach_timeline)
- COACH_TIMELINE_ADMIN_TOKEN: Shared admin token for the web API (default: unset, open)

USAGE:
    from coach_timeline.config import Config
    first_hour = Config.DAY_START_HOUR
    storage_dir = Config.get_storage_dir()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Coach Timeline.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    DAY GRID GEOMETRY:
    - One slot per hour from DAY_START_HOUR to DAY_END_HOUR inclusive
    - Each slot is SLOT_HEIGHT_PX tall, so 1 minute == SLOT_HEIGHT_PX / 60 px
    - Session cards never render shorter than MIN_CARD_HEIGHT_PX

    STORAGE STRUCTURE:
        .coach_timeline/
        ├── sessions.json      # List: session records with attendance
        └── challenges.json    # List: timed challenge records
    """

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    STORAGE_DIR: ClassVar[str] = ".coach_timeline"
    SESSIONS_FILE: ClassVar[str] = "sessions.json"
    CHALLENGES_FILE: ClassVar[str] = "challenges.json"

    # =========================================================================
    # DAY GRID
    # =========================================================================
    DAY_START_HOUR: ClassVar[int] = 5
    """First hour row of the day view (05:00)."""

    DAY_END_HOUR: ClassVar[int] = 23
    """Last hour row of the day view (23:00, ending at midnight)."""

    SLOT_HEIGHT_PX: ClassVar[float] = 60.0
    """Pixel height of one hour slot; the time-to-pixel scale factor."""

    MIN_CARD_HEIGHT_PX: ClassVar[float] = 40.0
    """Minimum rendered height so near-zero-duration sessions stay visible."""

    # =========================================================================
    # SESSIONS
    # =========================================================================
    DEFAULT_SESSION_MINUTES: ClassVar[int] = 60
    """Duration assumed when a session has no end time."""

    PERSONAL_ACTIVITY_TYPE: ClassVar[str] = "PT"
    """Activity type that marks a personal (one-client) session."""

    # =========================================================================
    # ANALYTICS
    # =========================================================================
    AVERAGE_PRECISION: ClassVar[int] = 1
    """Decimal places for average attendance in serialized summaries."""

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _storage_dir_override: ClassVar[str | None] = None
    _admin_token_override: ClassVar[str | None] = None

    @classmethod
    def get_storage_dir(cls) -> str:
        """
        Get the directory holding session and challenge JSON files.

        Uses a priority system: test overrides first, then the
        COACH_TIMELINE_STORAGE_DIR environment variable, then STORAGE_DIR.

        Returns:
            Storage directory path as a string.

        Example:
            >>> Config.get_storage_dir()
            '.coach_timeline'
        """
        if cls._storage_dir_override is not None:
            return cls._storage_dir_override
        return os.environ.get("COACH_TIMELINE_STORAGE_DIR", cls.STORAGE_DIR)

    @classmethod
    def get_admin_token(cls) -> str | None:
        """
        Get the shared admin token guarding the JSON API.

        Business context: Authentication is owned by the surrounding
        platform. The dashboard only needs a yes/no "is this caller an
        admin" answer, which a shared token provides. When no token is
        configured the API is open, which suits a local dashboard.

        Returns:
            Token string, or None when the gate is disabled.

        Example:
            >>> # With env var: COACH_TIMELINE_ADMIN_TOKEN=s3cret
            >>> Config.get_admin_token()
            's3cret'
        """
        if cls._admin_token_override is not None:
            return cls._admin_token_override or None
        return os.environ.get("COACH_TIMELINE_ADMIN_TOKEN") or None

    @classmethod
    def set_test_overrides(
        cls,
        storage_dir: str | None = None,
        admin_token: str | None = None,
    ) -> None:
        """
        Set test overrides for environment-based settings.

        Must call reset_test_overrides() in test teardown to avoid
        affecting other tests. An empty admin_token string forces the
        gate off regardless of the environment.

        Args:
            storage_dir: Override for the storage directory. None to clear.
            admin_token: Override for the admin token. None to clear.

        Example:
            >>> Config.set_test_overrides(admin_token='token')
            >>> Config.get_admin_token()
            'token'
            >>> Config.reset_test_overrides()
        """
        cls._storage_dir_override = storage_dir
        cls._admin_token_override = admin_token

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Clear all test overrides so settings come from the environment again."""
        cls._storage_dir_override = None
        cls._admin_token_override = None

    @classmethod
    def is_personal_activity_type(cls, activity_type: str | None) -> bool:
        """
        Check whether a stored activity type denotes a personal session.

        Activities without a type are treated as personal training, the
        same way the schedule view treats them.

        Args:
            activity_type: Raw activity type from storage, or None.

        Returns:
            True for a missing type or PERSONAL_ACTIVITY_TYPE.

        Example:
            >>> Config.is_personal_activity_type(None)
            True
            >>> Config.is_personal_activity_type('Circuits')
            False
        """
        return not activity_type or activity_type == cls.PERSONAL_ACTIVITY_TYPE
