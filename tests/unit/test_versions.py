"""Unit tests for version ordering."""

from forge_chronicles.versions import highest_version, version_key


class TestVersionKey:
    """Test the version_key function."""

    def test_numeric_ordering(self):
        """Test that components compare as numbers, not strings."""
        assert version_key("1.10.0") > version_key("1.9.0")

    def test_ignores_v_prefix(self):
        assert version_key("v1.2.3") == version_key("1.2.3") == (1, 2, 3)

    def test_non_numeric_version(self):
        assert version_key("unversioned") == ()


class TestHighestVersion:
    """Test the highest_version function."""

    def test_picks_highest(self):
        assert highest_version(["1.0.0", "1.10.0", "1.9.3"]) == "1.10.0"

    def test_skips_unknown_versions(self):
        """Test that None and empty versions are ignored."""
        assert highest_version([None, "0.2.0", ""]) == "0.2.0"

    def test_no_known_version(self):
        assert highest_version([None, None]) is None

    def test_empty_input(self):
        assert highest_version([]) is None

    def test_accepts_generator(self):
        assert highest_version(v for v in ["2.0.0", "1.0.0"]) == "2.0.0"
