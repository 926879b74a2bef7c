"""
Data models for Coach Timeline.

PURPOSE: Type-safe dataclasses for the records the timeline core consumes.
AI CONTEXT: Read-only projections of stored activities and challenges.

MODEL HIERARCHY:
- Session: Scheduled activity (personal training or group class)
  - AttendanceRecord: One user's RSVP for the session
    - AttendeeProfile: Optional name data used for display labels
- TimedChallenge: Date-bounded community challenge

SERIALIZATION:
All models have to_dict() for JSON persistence and from_dict() for loading.
Timestamps use ISO 8601. Timezone-aware values are converted to local
time and stored naive: the dashboard assumes a single local timezone.

USAGE:
    session = Session.from_dict({"id": "a1", "title": "Circuits",
                                 "start_at": "2024-01-01T09:00:00"})
    session.attending_count
    session.interval
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from .config import Config
from .intervals import Interval

__all__ = [
    "AttendanceStatus",
    "SessionKind",
    "AttendeeProfile",
    "AttendanceRecord",
    "Session",
    "TimedChallenge",
    "parse_timestamp",
    "parse_date",
]


class AttendanceStatus:
    """RSVP status values. Only ATTENDING counts toward occupancy."""

    ATTENDING = "attending"
    DECLINED = "declined"
    PENDING = "pending"


class SessionKind:
    """
    Session categories.

    PERSONAL: One assigned client; the client's name drives the label.
    GROUP: Open class; the title is the label.
    """

    PERSONAL = "personal"
    GROUP = "group"


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse an ISO 8601 timestamp into a naive local datetime.

    Handles the 'Z' suffix and explicit offsets. Aware values are
    converted to the local timezone and stripped of tzinfo.

    Args:
        value: ISO 8601 string or datetime.

    Returns:
        Naive datetime in local time.

    Raises:
        ValueError: If the string is not a valid ISO 8601 timestamp.
        TypeError: If value is neither a string nor a datetime.

    Example:
        >>> parse_timestamp('2024-01-01T09:00:00')
        datetime.datetime(2024, 1, 1, 9, 0)
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Expected ISO timestamp string, got {type(value).__name__}")
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def parse_date(value: str | date) -> date:
    """
    Parse a date, keeping only the calendar-day part of timestamps.

    Mirrors how challenge windows are stored: '2024-01-01' and
    '2024-01-01T00:00:00Z' both mean January 1st.

    Args:
        value: ISO date or datetime string, or a date/datetime.

    Returns:
        Calendar date.

    Raises:
        ValueError: If the string does not start with a valid ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.split("T")[0])


@dataclass
class AttendeeProfile:
    """Name fields of the user behind an attendance record."""

    first_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None

    @property
    def full_name(self) -> str:
        """First and last name joined, or '' when both are blank."""
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "nickname": self.nickname,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttendeeProfile:
        return cls(
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            nickname=data.get("nickname"),
        )


@dataclass
class AttendanceRecord:
    """One user's attendance entry for a session."""

    user_id: str
    status: str
    profile: AttendeeProfile | None = None

    @property
    def is_attending(self) -> bool:
        """True only for the 'attending' status."""
        return self.status == AttendanceStatus.ATTENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "status": self.status,
            "profiles": self.profile.to_dict() if self.profile else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttendanceRecord:
        """
        Deserialize an attendance record.

        Accepts the profile under 'profiles' (stored join shape) or
        'profile'.

        Raises:
            KeyError: If 'user_id' is missing.
        """
        profile_data = data.get("profiles") or data.get("profile")
        return cls(
            user_id=data["user_id"],
            status=data.get("status", AttendanceStatus.PENDING),
            profile=AttendeeProfile.from_dict(profile_data) if profile_data else None,
        )


@dataclass
class Session:
    """
    Scheduled session as consumed by the timeline core.

    TIME FIELDS:
    - start_at: Required start instant
    - end_at: Optional; effective_end falls back to start_at plus
      Config.DEFAULT_SESSION_MINUTES
    Upstream does not enforce end_at >= start_at; interval clamps a
    reversed session to zero duration.

    KINDS:
    - "personal": label is "PT: <client name>"
    - "group": label is the title
    """

    id: str
    title: str
    start_at: datetime
    end_at: datetime | None = None
    kind: str = SessionKind.GROUP
    attendance: list[AttendanceRecord] = field(default_factory=list)
    location_name: str | None = None
    attendees_confirmed: bool = False

    @property
    def effective_end(self) -> datetime:
        """
        End instant with the default duration applied.

        Returns:
            end_at when present, otherwise start_at + 60 minutes. Not
            clamped; use interval for a never-negative span.
        """
        if self.end_at is not None:
            return self.end_at
        return self.start_at + timedelta(minutes=Config.DEFAULT_SESSION_MINUTES)

    @property
    def interval(self) -> Interval:
        """Closed [start_at, effective_end] interval, clamped to zero width."""
        return Interval(self.start_at, self.effective_end)

    @property
    def attending_count(self) -> int:
        """Number of attendance records with status 'attending'."""
        return sum(1 for record in self.attendance if record.is_attending)

    @property
    def is_personal(self) -> bool:
        return self.kind == SessionKind.PERSONAL

    @property
    def client_name(self) -> str:
        """
        Name of the client for a personal session.

        Returns:
            "No client" when nobody is on the attendance list, "Unknown"
            when no attending record carries a usable name, otherwise the
            first attending client's "first last" name.
        """
        if not self.attendance:
            return "No client"
        first_attending = next((r for r in self.attendance if r.is_attending), None)
        if first_attending is None or first_attending.profile is None:
            return "Unknown"
        return first_attending.profile.full_name or "Unknown"

    @property
    def display_title(self) -> str:
        """
        Label shown on the timeline card.

        Example:
            >>> session.kind = SessionKind.PERSONAL
            >>> session.display_title
            'PT: Jane Doe'
        """
        if self.is_personal:
            return f"PT: {self.client_name}"
        return self.title

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize session to dictionary for JSON storage.

        Returns:
            Dict with ISO timestamps and embedded attendance records.
        """
        return {
            "id": self.id,
            "title": self.title,
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat() if self.end_at else None,
            "kind": self.kind,
            "location_name": self.location_name,
            "attendees_confirmed": self.attendees_confirmed,
            "attendance": [record.to_dict() for record in self.attendance],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        """
        Deserialize session from dictionary.

        Supports both the 'kind' key written by to_dict() and the raw
        'activity_type' column of the activities table ('PT' or absent
        means personal, anything else is a group session).

        Args:
            data: Dict with at least 'id' and 'start_at'.

        Returns:
            Session instance.

        Raises:
            KeyError: If 'id' or 'start_at' is missing.
            ValueError: If a timestamp is not valid ISO 8601.

        Example:
            >>> Session.from_dict({'id': 'a1', 'title': 'PT',
            ...                    'start_at': '2024-01-01T09:00:00',
            ...                    'activity_type': 'PT'}).kind
            'personal'
        """
        kind = data.get("kind")
        if kind not in (SessionKind.PERSONAL, SessionKind.GROUP):
            kind = (
                SessionKind.PERSONAL
                if Config.is_personal_activity_type(data.get("activity_type"))
                else SessionKind.GROUP
            )
        end_raw = data.get("end_at")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            start_at=parse_timestamp(data["start_at"]),
            end_at=parse_timestamp(end_raw) if end_raw else None,
            kind=kind,
            attendance=[AttendanceRecord.from_dict(a) for a in data.get("attendance") or []],
            location_name=data.get("location_name"),
            attendees_confirmed=bool(data.get("attendees_confirmed", False)),
        )


@dataclass
class TimedChallenge:
    """
    Community challenge running over a window of whole days.

    The window is inclusive on both ends: a challenge from Jan 1 to
    Jan 7 is active all day on Jan 7.
    """

    id: str
    title: str
    start_date: date
    end_date: date
    challenge_type: str = ""
    description: str | None = None

    @property
    def interval(self) -> Interval:
        """Day-aligned interval from start of start_date to end of end_date."""
        return Interval.for_days(self.start_date, self.end_date)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "challenge_type": self.challenge_type,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimedChallenge:
        """
        Deserialize a timed challenge.

        Raises:
            KeyError: If 'id', 'start_date' or 'end_date' is missing.
            ValueError: If a date is not valid ISO 8601.
        """
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            start_date=parse_date(data["start_date"]),
            end_date=parse_date(data["end_date"]),
            challenge_type=data.get("challenge_type") or "",
            description=data.get("description"),
        )
