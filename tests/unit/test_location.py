"""
Module: test_location.py
Description: Unit tests for origin strings.
"""

from raven_client.utils.location import here, location_info


class TestLocation:
    """Test cases for location helpers."""

    def test_location_info(self):
        """Test the culprit layout."""
        assert location_info("main.py", "run", 12) == "main.py in run at 12"

    def test_here_describes_caller(self):
        """Test here() reports the calling function."""
        origin = here()

        assert origin.startswith("test_location.py in test_here_describes_caller at ")

    def test_here_walks_frames(self):
        """Test depth selects an outer frame."""
        def inner():
            return here(depth=2)

        assert "in test_here_walks_frames at" in inner()
