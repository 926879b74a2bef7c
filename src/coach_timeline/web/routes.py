"""
FastAPI routes for the Coach Timeline dashboard.

PURPOSE: Thin route handlers that delegate to presenters.
AI CONTEXT: Routes parse and validate request parameters, presenters do
the rest. Every request refetches and recomputes.

ROUTE STRUCTURE:
- / : Day schedule page (full HTML)
- /partials/* : htmx partial updates (timeline, PNG chart panel, SVG trend)
- /charts/* : PNG chart images
- /api/* : JSON endpoints, behind the admin gate
"""

from __future__ import annotations

import secrets
import time
from datetime import date, datetime
from html import escape
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException
from fastapi.responses import HTMLResponse, Response

from ..config import Config
from ..models import SessionKind, TimedChallenge
from ..presenters import (
    AttendanceChartViewModel,
    AttendancePresenter,
    ChallengePresenter,
    ChallengeRejected,
    ChartPresenter,
    DayTimelinePresenter,
    DayTimelineViewModel,
    SessionListsViewModel,
)
from ..statistics import AttendanceAggregator, BucketOrder
from ..storage import StorageManager

__all__ = [
    "router",
    "get_storage",
    "get_aggregator",
    "get_timeline_presenter",
    "get_attendance_presenter",
    "get_challenge_presenter",
    "get_chart_presenter",
    "require_admin",
]

router = APIRouter()

_DASHBOARD_CSS = """
:root {
    --bg: #0f172a;
    --surface: #1e293b;
    --border: #334155;
    --text: #f1f5f9;
    --text-muted: #94a3b8;
    --primary: #3b82f6;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: var(--bg);
    color: var(--text);
    line-height: 1.5;
}
.container { max-width: 1100px; margin: 0 auto; padding: 1.5rem; }
header {
    display: flex;
    justify-content: space-between;
    align-items: center;
    margin-bottom: 1.5rem;
}
header nav a { color: var(--primary); margin-left: 1rem; text-decoration: none; }
.panel {
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: 0.5rem;
    padding: 1rem;
    margin-bottom: 1rem;
}
.panel h2 { font-size: 1rem; color: var(--text-muted); margin-bottom: 0.75rem; }
.timeline { position: relative; }
.slot-row {
    display: flex;
    border-top: 1px solid var(--border);
}
.slot-row.past { opacity: 0.45; }
.slot-label { width: 64px; font-size: 0.75rem; color: var(--text-muted); padding: 2px 4px; }
.cards { position: absolute; top: 0; left: 72px; right: 0; }
.card {
    position: absolute;
    left: 0;
    right: 0;
    border-radius: 0.375rem;
    padding: 2px 8px;
    font-size: 0.8rem;
    overflow: hidden;
    border-left: 3px solid rgba(255, 255, 255, 0.5);
}
.card .time { color: rgba(255, 255, 255, 0.75); font-size: 0.7rem; }
.empty { color: var(--text-muted); text-align: center; padding: 2rem; }
.chart-container img { max-width: 100%; }
.attendance-trend { display: block; width: 100%; height: auto; }
footer {
    margin-top: 2rem;
    padding-top: 1rem;
    border-top: 1px solid var(--border);
    color: var(--text-muted);
    font-size: 0.875rem;
    text-align: center;
}
"""

# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_storage() -> StorageManager:
    """
    Create a StorageManager for this request.

    A new instance per request means every page reflects the latest
    data on disk.

    Returns:
        StorageManager using Config.get_storage_dir().
    """
    return StorageManager()


def get_aggregator() -> AttendanceAggregator:
    return AttendanceAggregator()


def get_timeline_presenter() -> DayTimelinePresenter:
    """
    Create a DayTimelinePresenter with its storage.

    Business context: Backs the schedule page, the timeline partial
    and the session list API.

    Returns:
        DayTimelinePresenter bound to get_storage().
    """
    return DayTimelinePresenter(get_storage())


def get_attendance_presenter() -> AttendancePresenter:
    return AttendancePresenter(get_storage(), get_aggregator())


def get_challenge_presenter() -> ChallengePresenter:
    return ChallengePresenter(get_storage())


def get_chart_presenter() -> ChartPresenter:
    """
    Create a ChartPresenter for server-side PNG rendering.

    Returns:
        ChartPresenter bound to get_storage() and get_aggregator().
    """
    return ChartPresenter(get_storage(), get_aggregator())


def require_admin(
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """
    Gate /api/* routes behind the admin token.

    Business context: Attendance and client names are staff-only data.
    When COACH_TIMELINE_ADMIN_TOKEN is unset the gate is open, which
    suits a dashboard bound to localhost.

    Args:
        x_admin_token: Value of the X-Admin-Token request header.

    Raises:
        HTTPException: 403 when a token is configured and the header is
            missing or does not match.
    """
    expected = Config.get_admin_token()
    if expected is None:
        return
    if x_admin_token is None or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=403, detail="Admin access required")


def _now() -> datetime:
    return datetime.now()


def _parse_day(value: str | None, name: str = "day") -> date:
    """
    Parse a YYYY-MM-DD query parameter, defaulting to today.

    Raises:
        HTTPException: 400 when the value is not a valid date.
    """
    if value is None or value == "":
        return _now().date()
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value!r}") from e


def _require_date(value: str | None, name: str) -> date:
    """
    Parse a required date query parameter.

    Raises:
        HTTPException: 400 when missing or malformed.
    """
    if not value:
        raise HTTPException(status_code=400, detail=f"{name} is required")
    return _parse_day(value, name)


def _validate_order(order: str) -> str:
    if order not in BucketOrder.ALL:
        raise HTTPException(
            status_code=400,
            detail=f"order must be one of {sorted(BucketOrder.ALL)}",
        )
    return order


def _validate_kind(kind: str | None) -> str | None:
    if kind is not None and kind not in (SessionKind.PERSONAL, SessionKind.GROUP):
        raise HTTPException(status_code=400, detail=f"Unknown session kind: {kind!r}")
    return kind


# ============================================================================
# Full Page Routes
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    presenter: Annotated[DayTimelinePresenter, Depends(get_timeline_presenter)],
    day: str | None = None,
) -> HTMLResponse:
    """
    Render the day schedule page.

    Business context: The coach's home screen. Shows one row per hour
    from 5 AM to 11 PM with each session drawn as a card, plus the
    attendance chart. The timeline refreshes itself every minute so
    rows dim as the day progresses.

    Args:
        presenter: DayTimelinePresenter injected via FastAPI Depends.
        day: Day to show as YYYY-MM-DD. Default: today.

    Returns:
        HTMLResponse with the complete page.

    Raises:
        HTTPException: 400 for a malformed day.
    """
    view = presenter.get_day_view(_parse_day(day), _now())
    html = _render_dashboard_html(view)
    return HTMLResponse(content=html, media_type="text/html; charset=utf-8")


# ============================================================================
# Partial Routes (htmx)
# ============================================================================


@router.get("/partials/timeline", response_class=HTMLResponse)
async def timeline_partial(
    presenter: Annotated[DayTimelinePresenter, Depends(get_timeline_presenter)],
    day: str | None = None,
) -> HTMLResponse:
    """Render the timeline fragment for htmx refresh."""
    view = presenter.get_day_view(_parse_day(day), _now())
    return HTMLResponse(content=_render_timeline(view), media_type="text/html; charset=utf-8")


@router.get("/partials/attendance-chart", response_class=HTMLResponse)
async def attendance_chart_partial() -> HTMLResponse:
    """
    Render the attendance chart panel with a cache-busted image URL.

    Returns:
        HTMLResponse containing the chart panel HTML.
    """
    timestamp = int(time.time())
    html = f"""<h2>Class Attendance</h2>
        <div class="chart-container">
            <img src="/charts/attendance.png?t={timestamp}" alt="Attendance Chart">
        </div>"""
    return HTMLResponse(content=html, media_type="text/html; charset=utf-8")


@router.get("/partials/attendance-trend", response_class=HTMLResponse)
async def attendance_trend_partial(
    presenter: Annotated[AttendancePresenter, Depends(get_attendance_presenter)],
    kind: str | None = None,
    order: str = BucketOrder.LABEL,
) -> HTMLResponse:
    """
    Render the attendance trend as an inline SVG line chart.

    Business context: Unlike the PNG, the inline chart needs no
    matplotlib and gives each point a hover tooltip with its count.

    Args:
        presenter: AttendancePresenter injected via FastAPI Depends.
        kind: 'personal' or 'group' to restrict sessions. Default: all.
        order: 'label' (default) or 'chronological'.

    Returns:
        HTMLResponse containing the chart panel HTML.

    Raises:
        HTTPException: 400 for an unknown kind or order.
    """
    chart = presenter.get_chart(kind=_validate_kind(kind), order=_validate_order(order))
    html = f"""<h2>Attendance Over Time</h2>
        {_render_attendance_svg(chart)}"""
    return HTMLResponse(content=html, media_type="text/html; charset=utf-8")


# ============================================================================
# Chart Routes (PNG images)
# ============================================================================


@router.get("/charts/attendance.png")
async def attendance_chart(
    presenter: Annotated[ChartPresenter, Depends(get_chart_presenter)],
    kind: str | None = None,
    order: str = BucketOrder.LABEL,
) -> Response:
    """
    Serve the attendance trend chart.

    Returns:
        PNG (image/png), or an SVG placeholder (image/svg+xml) when
        matplotlib is not installed.

    Raises:
        HTTPException: 400 for an unknown kind or order.
    """
    kind = _validate_kind(kind)
    order = _validate_order(order)
    try:
        png_bytes = presenter.render_attendance_chart(kind=kind, order=order)
        return Response(content=png_bytes, media_type="image/png")
    except ImportError:
        return Response(
            content=_placeholder_chart_svg("Attendance"),
            media_type="image/svg+xml",
        )


# ============================================================================
# API Routes (JSON)
# ============================================================================


@router.get("/api/timeline", dependencies=[Depends(require_admin)])
async def api_timeline(
    presenter: Annotated[DayTimelinePresenter, Depends(get_timeline_presenter)],
    day: str | None = None,
    include_out_of_window: bool = False,
) -> dict[str, Any]:
    """
    Get the day layout as JSON.

    Returns:
        Dict with 'day', 'slot_height_px', 'slots' (each with label,
        start, end and the ids of sessions starting in it) and 'sessions'
        (positioned cards with top and height in px).

    Example:
        >>> # GET /api/timeline?day=2024-01-01
        >>> {"day": "2024-01-01", "slots": [{"label": "5 AM", ...}], ...}
    """
    view = presenter.get_day_view(_parse_day(day), _now(), include_out_of_window)
    data = view.layout.to_dict()
    past_rows = {row.hour_index: row.is_past for row in view.rows}
    for slot in data["slots"]:
        slot["is_past"] = past_rows.get(slot["hour_index"], False)
    return data


@router.get("/api/attendance", dependencies=[Depends(require_admin)])
async def api_attendance(
    presenter: Annotated[AttendancePresenter, Depends(get_attendance_presenter)],
    kind: str | None = None,
    order: str = BucketOrder.LABEL,
) -> dict[str, Any]:
    """
    Get attendance buckets and summary as JSON.

    Args:
        kind: 'personal' or 'group' to restrict sessions. Default: all.
        order: 'label' (default) or 'chronological'.

    Returns:
        Dict with 'attendance_data' (one entry per day and start time)
        and 'summary' (average rounded to one decimal).

    Raises:
        HTTPException: 400 for an unknown kind or order.
    """
    report = presenter.get_report(kind=_validate_kind(kind), order=_validate_order(order))
    return report.to_dict()


@router.get("/api/sessions", dependencies=[Depends(require_admin)])
async def api_sessions(
    presenter: Annotated[DayTimelinePresenter, Depends(get_timeline_presenter)],
    view: str = "upcoming",
) -> dict[str, Any]:
    """
    Get sessions categorized relative to now.

    Args:
        view: 'upcoming' (default, next first), 'past' (most recent
            first) or 'today' (clipped to today's part).

    Returns:
        Dict with 'view' and 'sessions'.

    Raises:
        HTTPException: 400 for an unknown view.
    """
    lists: SessionListsViewModel = presenter.get_session_lists(_now())
    try:
        items = lists.view(view)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"view": view, "sessions": [item.to_dict() for item in items]}


@router.get("/api/challenges", dependencies=[Depends(require_admin)])
async def api_challenges(
    presenter: Annotated[ChallengePresenter, Depends(get_challenge_presenter)],
    start_date: str | None = None,
    end_date: str | None = None,
) -> dict[str, Any]:
    """
    List timed challenges active in a date range.

    Args:
        start_date: First day, YYYY-MM-DD. Required.
        end_date: Last day, YYYY-MM-DD, inclusive. Required.

    Returns:
        Dict with 'challenges', each carrying its 'status'.

    Raises:
        HTTPException: 400 when either date is missing or malformed.
    """
    start = _require_date(start_date, "start_date")
    end = _require_date(end_date, "end_date")
    items = presenter.list_challenges(start, end, today=_now().date())
    return {"challenges": [item.to_dict() for item in items]}


@router.post("/api/challenges", status_code=201, dependencies=[Depends(require_admin)])
async def api_create_challenge(
    presenter: Annotated[ChallengePresenter, Depends(get_challenge_presenter)],
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """
    Create a timed challenge.

    Body fields: title, start_date, end_date (YYYY-MM-DD), optional
    challenge_type and description. The id is always generated from the
    clock; an id in the body is ignored.

    Returns:
        The stored challenge with its status.

    Raises:
        HTTPException: 400 for missing or malformed fields, end_date
            before start_date, or an overlap with an existing challenge.
    """
    data = {**payload, "id": f"tc-{time.time_ns()}"}
    try:
        challenge = TimedChallenge.from_dict(data)
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid challenge: {e!r}") from e
    try:
        created = presenter.create_challenge(challenge, today=_now().date())
    except ChallengeRejected as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return created.to_dict()


@router.get("/api/report", dependencies=[Depends(require_admin)])
async def api_report(
    presenter: Annotated[AttendancePresenter, Depends(get_attendance_presenter)],
) -> dict[str, str]:
    """
    Get the plain-text attendance report, as printed by the CLI.

    Returns:
        Dict with single key 'report'.
    """
    report = presenter.get_report()
    return {"report": presenter.aggregator.generate_summary_report(report)}


# ============================================================================
# Template Rendering Helpers
# ============================================================================


def _placeholder_chart_svg(title: str) -> bytes:
    """
    Generate a placeholder SVG when matplotlib is unavailable.

    Args:
        title: Chart title shown in the placeholder.

    Returns:
        UTF-8 SVG bytes reading "{title} Chart (install matplotlib)".
    """
    svg = f"""<svg xmlns="http://www.w3.org/2000/svg" width="400" height="200">
        <rect width="100%" height="100%" fill="#f1f5f9"/>
        <text x="50%" y="50%" text-anchor="middle" fill="#64748b" font-size="16">
            {title} Chart (install matplotlib)
        </text>
    </svg>"""
    return svg.encode("utf-8")


def _render_attendance_svg(chart: AttendanceChartViewModel) -> str:
    """
    Render attendance chart geometry as SVG.

    Points at or above the average are highlighted. An empty report
    still draws the axes with a message instead of a line.

    Args:
        chart: AttendanceChartViewModel from the presenter.

    Returns:
        SVG element as a string.
    """
    left, right = chart.plot_left, chart.plot_right
    top, bottom = chart.plot_top, chart.plot_bottom
    average = chart.report.summary.average_attendance
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" class="attendance-trend" '
        f'width="{chart.width:g}" height="{chart.height:g}" '
        f'viewBox="0 0 {chart.width:g} {chart.height:g}">'
    ]
    for label, y in chart.y_axis_ticks:
        parts.append(
            f'<line x1="{left:g}" y1="{y:g}" x2="{right:g}" y2="{y:g}" '
            f'stroke="rgba(255, 255, 255, 0.05)"/>'
            f'<text x="{left - 10:g}" y="{y + 4:g}" fill="#94a3b8" font-size="12" '
            f'text-anchor="end">{label}</text>'
        )
    parts.append(
        f'<line x1="{left:g}" y1="{top:g}" x2="{left:g}" y2="{bottom:g}" '
        f'stroke="rgba(255, 255, 255, 0.2)" stroke-width="2"/>'
        f'<line x1="{left:g}" y1="{bottom:g}" x2="{right:g}" y2="{bottom:g}" '
        f'stroke="rgba(255, 255, 255, 0.2)" stroke-width="2"/>'
    )
    if not chart.points:
        parts.append(
            f'<text x="{(left + right) / 2:g}" y="{(top + bottom) / 2:g}" fill="#94a3b8" '
            f'text-anchor="middle">No attendance data yet</text></svg>'
        )
        return "".join(parts)

    parts.append(
        f'<line class="average" x1="{left:g}" y1="{chart.average_y:g}" x2="{right:g}" '
        f'y2="{chart.average_y:g}" stroke="rgba(255, 255, 255, 0.2)" '
        f'stroke-dasharray="4 4"/>'
        f'<text x="{right - 10:g}" y="{chart.average_y - 5:g}" fill="#94a3b8" '
        f'font-size="11" text-anchor="end">{escape(chart.average_display)}</text>'
        f'<polyline points="{chart.polyline}" fill="none" stroke="#3b82f6" '
        f'stroke-width="3" stroke-linejoin="round"/>'
    )
    for point in chart.points:
        fill = "#3b82f6" if point.value >= average else "rgba(255, 255, 255, 0.6)"
        parts.append(
            f'<circle cx="{point.x:g}" cy="{point.y:g}" r="4" fill="{fill}">'
            f"<title>{escape(point.label)}: {point.value} attendees</title></circle>"
        )
        if point.show_label:
            parts.append(
                f'<text x="{point.x:g}" y="{bottom + 20:g}" fill="#94a3b8" '
                f'font-size="11" text-anchor="middle">{escape(point.label)}</text>'
            )
    parts.append("</svg>")
    return "".join(parts)


def _render_timeline(view: DayTimelineViewModel) -> str:
    """
    Render hour rows and absolutely positioned session cards.

    Rows are slot_height_px tall; cards use the px offsets computed by
    the positioner, so a card can span several rows.

    Args:
        view: DayTimelineViewModel from the presenter.

    Returns:
        HTML fragment.
    """
    slot_height = view.layout.slot_height_px
    rows = "".join(
        f'<div class="slot-row{" past" if row.is_past else ""}" '
        f'style="height: {slot_height:g}px;">'
        f'<span class="slot-label">{escape(row.label)}</span></div>'
        for row in view.rows
    )
    cards = "".join(
        f'<div class="card" style="top: {card.top:g}px; height: {card.height:g}px; '
        f'background: {card.color};" title="{card.attending_count} attending">'
        f"<div>{escape(card.title)}</div>"
        f'<div class="time">{escape(card.time_range_display)}</div></div>'
        for card in view.cards
    )
    empty = "" if not view.is_empty else '<div class="empty">No sessions scheduled</div>'
    return f"""<h2>{escape(view.day_display)}</h2>
        {empty}
        <div class="timeline" style="height: {view.canvas_height:g}px;">
            {rows}
            <div class="cards">{cards}</div>
        </div>"""


def _render_dashboard_html(view: DayTimelineViewModel) -> str:
    """
    Render the complete dashboard page.

    Args:
        view: DayTimelineViewModel for the selected day.

    Returns:
        Full HTML document with htmx refresh triggers.
    """
    day_param = view.day.isoformat()
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Coach Timeline - {escape(view.day_display)}</title>
    <script src="https://unpkg.com/htmx.org@1.9.10"></script>
    <style>
        {_DASHBOARD_CSS}
    </style>
</head>
<body>
    <div class="container">
        <header>
            <h1>Coach Timeline</h1>
            <nav>
                <form method="get" action="/">
                    <input type="date" name="day" value="{day_param}"
                           onchange="this.form.submit()">
                </form>
            </nav>
        </header>

        <div class="panel" id="timeline-panel"
             hx-get="/partials/timeline?day={day_param}"
             hx-trigger="every 60s"
             hx-swap="innerHTML">
            {_render_timeline(view)}
        </div>

        <div class="panel" id="attendance-chart-panel"
             hx-get="/partials/attendance-chart"
             hx-trigger="every 300s"
             hx-swap="innerHTML">
            <h2>Class Attendance</h2>
            <div class="chart-container">
                <img src="/charts/attendance.png" alt="Attendance Chart">
            </div>
        </div>

        <div class="panel" id="attendance-trend-panel"
             hx-get="/partials/attendance-trend"
             hx-trigger="load, every 300s"
             hx-swap="innerHTML">
            <h2>Attendance Over Time</h2>
        </div>

        <footer>
            Coach Timeline &bull; Powered by FastAPI + htmx
        </footer>
    </div>
</body>
</html>"""
