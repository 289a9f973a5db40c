"""Unit tests for path helper functions."""

from pathlib import Path

from forge_chronicles.paths import (
    get_artifacts_dir,
    get_broadcast_path,
    get_ledger_paths,
    get_project_root,
)


class TestGetProjectRoot:
    """Test the get_project_root function."""

    def test_defaults_to_current_directory(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert get_project_root() == Path.cwd()

    def test_relative_root_converted_to_absolute(self, tmp_path: Path, monkeypatch):
        """Test that relative custom root is converted to absolute path."""
        monkeypatch.chdir(tmp_path)

        root = get_project_root("relative_project")

        assert root.is_absolute()
        assert root == tmp_path / "relative_project"

    def test_accepts_string(self, tmp_path: Path):
        assert get_project_root(str(tmp_path)) == tmp_path


class TestGetBroadcastPath:
    """Test the get_broadcast_path function."""

    def test_layout(self, tmp_path: Path):
        path = get_broadcast_path("Deploy.s.sol", 11155111, tmp_path)

        assert path == tmp_path / "broadcast" / "Deploy.s.sol" / "11155111" / "run-latest.json"


class TestGetLedgerPaths:
    """Test the get_ledger_paths function."""

    def test_returns_tuple_of_two_paths(self, tmp_path: Path):
        result = get_ledger_paths(1, tmp_path)

        assert isinstance(result, tuple)
        assert len(result) == 2

    def test_chain_scoped_filenames(self, tmp_path: Path):
        """Test that ledger and report are named after the chain id."""
        ledger_path, report_path = get_ledger_paths(137, tmp_path)

        assert ledger_path == tmp_path / "deployments" / "json" / "137.json"
        assert report_path == tmp_path / "deployments" / "137.md"

    def test_paths_are_absolute(self):
        ledger_path, report_path = get_ledger_paths(1)

        assert ledger_path.is_absolute()
        assert report_path.is_absolute()


class TestGetArtifactsDir:
    def test_forge_out_directory(self, tmp_path: Path):
        assert get_artifacts_dir(tmp_path) == tmp_path / "out"
