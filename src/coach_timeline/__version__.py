"""Version information for coach-timeline."""

__version__ = "0.4.2"
__version_date__ = "2026-10-19"

__title__ = "coach_timeline"
__description__ = "Day-timeline scheduling and attendance analytics for a coaching dashboard"
__url__ = "https://github.com/coach-timeline/coach-timeline"

__author__ = "Coach Timeline Contributors"

__license__ = "MIT"
__copyright__ = "Copyright 2026 Coach Timeline Contributors"

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
