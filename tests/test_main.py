"""Main test module for coach-timeline."""

import coach_timeline


class TestVersion:
    """Test version information."""

    def test_version_format(self) -> None:
        """Verifies version follows semantic versioning format.

        Business context:
        Semantic versioning communicates compatibility. MAJOR for
        breaking changes, MINOR for features, PATCH for fixes.

        Arrangement:
        None - tests package-level attribute.

        Action:
        Parse version string and validate components.

        Assertion Strategy:
        Validates 3 parts, all numeric.
        """
        parts = coach_timeline.__version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)

    def test_title_exists(self) -> None:
        assert coach_timeline.__title__ == "coach_timeline"

    def test_license_exists(self) -> None:
        assert coach_timeline.__license__ == "MIT"
