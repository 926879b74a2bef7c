"""
Web dashboard for Coach Timeline.

PURPOSE: FastAPI app serving the day schedule with htmx refresh.

FEATURES:
- Day timeline with hour rows and positioned session cards
- Server-side attendance chart (matplotlib)
- JSON endpoints for timeline, attendance, sessions and timed challenges

USAGE:
    # Via CLI
    coach-timeline dashboard

    # Programmatically
    from coach_timeline.web import create_app
    app = create_app()
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]
