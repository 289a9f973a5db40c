"""Integration tests for the forge-chronicles command line."""

import json
import shutil

from click.testing import CliRunner

from conftest import FOO_PROXY, SEPOLIA
from forge_chronicles.cli import main

PROJECT_URL = "https://github.com/acme/contracts"


def invoke(*args, env=None):
    runner = CliRunner()
    return runner.invoke(main, list(args), env=env or {"RPC_URL": None})


class TestUsage:
    """Test argument handling."""

    def test_missing_chain_id_is_usage_error(self):
        result = invoke("Deploy.s.sol")

        assert result.exit_code == 2
        assert "--chain-id" in result.output

    def test_unknown_flag_is_usage_error(self):
        result = invoke("Deploy.s.sol", "-c", "1", "--bogus")

        assert result.exit_code == 2
        assert "Usage" in result.output

    def test_non_numeric_chain_id(self):
        result = invoke("-c", "sepolia")

        assert result.exit_code == 2

    def test_help(self):
        result = invoke("--help")

        assert result.exit_code == 0
        assert "--skip-json" in result.output
        assert "--force" in result.output


class TestRun:
    """Test full invocations against a project directory."""

    def test_generates_ledger_and_report(self, project_root):
        """Test that a first run writes both outputs without an RPC URL."""
        result = invoke(
            "-c", str(SEPOLIA), "--root", str(project_root), "--no-build", "--project-url", PROJECT_URL
        )

        assert result.exit_code == 0, result.output
        assert "Generation complete!" in result.output
        assert (project_root / "deployments" / "json" / f"{SEPOLIA}.json").exists()
        assert (project_root / "deployments" / f"{SEPOLIA}.md").exists()

    def test_already_processed_exits_non_zero(self, project_root):
        args = ["-c", str(SEPOLIA), "--root", str(project_root), "--no-build", "--project-url", PROJECT_URL]
        assert invoke(*args).exit_code == 0

        result = invoke(*args)

        assert result.exit_code == 1
        assert "already processed" in result.output

    def test_upgrade_without_rpc_is_rejected(self, project_root, fixtures_dir):
        """Test that an upgrade cannot be recorded without an RPC URL."""
        args = ["-c", str(SEPOLIA), "--root", str(project_root), "--no-build", "--project-url", PROJECT_URL]
        assert invoke(*args).exit_code == 0
        ledger_path = project_root / "deployments" / "json" / f"{SEPOLIA}.json"
        before = ledger_path.read_bytes()
        shutil.copy(
            fixtures_dir / "broadcast" / "run_upgrade.json",
            project_root / "broadcast" / "Deploy.s.sol" / str(SEPOLIA) / "run-latest.json",
        )

        result = invoke(*args)

        assert result.exit_code == 1
        assert "No RPC URL provided" in result.output
        assert ledger_path.read_bytes() == before

    def test_skip_json_uses_existing_ledger(self, project_root, sample_ledger_json, monkeypatch):
        """Test that --skip-json only renders the saved ledger."""
        ledger_path = project_root / "deployments" / "json" / f"{SEPOLIA}.json"
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text(json.dumps(sample_ledger_json))

        def fail_extract(*args, **kwargs):
            raise AssertionError("ledger should not be regenerated")

        monkeypatch.setattr("forge_chronicles.cli.extract_and_save_ledger", fail_extract)

        result = invoke("-c", str(SEPOLIA), "-s", "--root", str(project_root), "--project-url", PROJECT_URL)

        assert result.exit_code == 0, result.output
        assert FOO_PROXY in (project_root / "deployments" / f"{SEPOLIA}.md").read_text()

    def test_skip_json_without_ledger(self, tmp_path):
        result = invoke("-c", str(SEPOLIA), "-s", "--root", str(tmp_path), "--project-url", PROJECT_URL)

        assert result.exit_code == 1
        assert "Ledger not found" in result.output

    def test_force_passes_through(self, project_root, monkeypatch):
        calls = []

        def fake_extract(chain_id, **kwargs):
            calls.append((chain_id, kwargs))
            return None

        monkeypatch.setattr("forge_chronicles.cli.extract_and_save_ledger", fake_extract)
        monkeypatch.setattr("forge_chronicles.cli.generate_report", lambda *a, **k: project_root / "x.md")

        result = invoke(
            "Upgrade.s.sol", "-c", "1", "-f", "-r", "http://rpc.example.com", "--no-build", "--root", str(project_root)
        )

        assert result.exit_code == 0, result.output
        chain_id, kwargs = calls[0]
        assert chain_id == 1
        assert kwargs["script_name"] == "Upgrade.s.sol"
        assert kwargs["force"] is True
        assert kwargs["rpc_url"] == "http://rpc.example.com"
        assert kwargs["build"] is False
