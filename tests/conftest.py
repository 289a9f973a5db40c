"""Shared pytest fixtures for forge-chronicles tests."""

import json
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from forge_chronicles.artifacts import load_abi
from forge_chronicles.oracle import ChainOracle
from forge_chronicles.parsers import parse_broadcast
from forge_chronicles.types import DeploymentRun, Ledger

FOO_IMPL = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
FOO_PROXY = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
FOO_ADMIN = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
FOO_IMPL_V2 = "0xDc64a140Aa3E981100a9becA4E685f962f0cF6C9"
BAR = "0xCf7Ed3AccA5a467e9e704C703E8D87F634fB0Fc9"

SEPOLIA = 11155111


class StubOracle(ChainOracle):
    """ChainOracle answering from dictionaries instead of an RPC node."""

    def __init__(
        self,
        versions: Optional[Dict[str, str]] = None,
        implementations: Optional[Dict[str, str]] = None,
    ):
        super().__init__("http://stub-rpc.invalid")
        self.versions = versions or {}
        self.implementations = implementations or {}
        self.implementation_reads: List[str] = []

    def read_version(self, address: str) -> Optional[str]:
        return self.versions.get(address)

    def read_implementation(self, proxy_address: str) -> Optional[str]:
        self.implementation_reads.append(proxy_address)
        return self.implementations.get(proxy_address)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the path to the sample forge output directory."""
    return fixtures_dir / "out"


@pytest.fixture
def abi_lookup(artifacts_dir: Path) -> Callable[[str], List[Dict[str, Any]]]:
    """ABI lookup reading the sample forge artifacts."""
    return lambda contract_name: load_abi(contract_name, artifacts_dir)


@pytest.fixture
def new_deployments_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Broadcast creating Foo behind a proxy and a plain Bar."""
    with open(fixtures_dir / "broadcast" / "run_new_deployments.json") as f:
        return json.load(f)


@pytest.fixture
def upgrade_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Broadcast deploying a new Foo implementation and upgrading the proxy."""
    with open(fixtures_dir / "broadcast" / "run_upgrade.json") as f:
        return json.load(f)


@pytest.fixture
def new_deployments_run(new_deployments_json: Dict[str, Any]) -> DeploymentRun:
    return parse_broadcast(new_deployments_json)


@pytest.fixture
def upgrade_run(upgrade_json: Dict[str, Any]) -> DeploymentRun:
    return parse_broadcast(upgrade_json)


@pytest.fixture
def sample_ledger_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Ledger produced by the new deployments broadcast."""
    with open(fixtures_dir / "sample_ledger.json") as f:
        return json.load(f)


@pytest.fixture
def sample_ledger(sample_ledger_json: Dict[str, Any]) -> Ledger:
    return Ledger.from_dict(sample_ledger_json)


@pytest.fixture
def stub_oracle() -> StubOracle:
    """Oracle knowing Foo's version and the upgraded implementation slot."""
    return StubOracle(
        versions={FOO_PROXY: "1.0.0"},
        implementations={FOO_PROXY: FOO_IMPL_V2},
    )


@pytest.fixture
def project_root(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Foundry project with forge output and the new deployments broadcast."""
    root = tmp_path / "project"
    shutil.copytree(fixtures_dir / "out", root / "out")

    broadcast_dir = root / "broadcast" / "Deploy.s.sol" / str(SEPOLIA)
    broadcast_dir.mkdir(parents=True)
    shutil.copy(
        fixtures_dir / "broadcast" / "run_new_deployments.json",
        broadcast_dir / "run-latest.json",
    )
    return root
