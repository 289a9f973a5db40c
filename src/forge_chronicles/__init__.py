"""
forge-chronicles: Python library for recording Foundry smart contract deployments
"""

from importlib.metadata import PackageNotFoundError, version

from .chronicle import extract_and_save_ledger, generate_report
from .exceptions import (
    AlreadyProcessedError,
    AmbiguousContractNameError,
    ArtifactBuildError,
    ArtifactNotFoundError,
    ChronicleError,
    ConstructorArityMismatchError,
    DuplicateNonUpgradeableError,
    LedgerCorruptedError,
    LedgerNotFoundError,
    MalformedRunError,
    OracleUnavailableError,
    ReconciliationError,
    RunNotFoundError,
    UnexpectedProxyError,
    UpgradeNotConfirmedError,
)
from .ledger import load_ledger, save_ledger
from .oracle import ChainOracle
from .parsers import load_run
from .reconcile import ReconcileOptions, ReconciliationResult, reconcile
from .report import render_markdown
from .types import (
    ContractInput,
    ContractSnapshot,
    CreationEvent,
    DeploymentRun,
    HistoryEntry,
    Ledger,
    NonUpgradeableEntry,
    UpgradeableEntry,
)

try:
    __version__ = version("forge-chronicles")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "extract_and_save_ledger",
    "generate_report",
    "reconcile",
    "ReconcileOptions",
    "ReconciliationResult",
    "ChainOracle",
    "load_ledger",
    "save_ledger",
    "load_run",
    "render_markdown",
    "CreationEvent",
    "DeploymentRun",
    "ContractInput",
    "ContractSnapshot",
    "HistoryEntry",
    "Ledger",
    "NonUpgradeableEntry",
    "UpgradeableEntry",
    "ChronicleError",
    "LedgerNotFoundError",
    "LedgerCorruptedError",
    "RunNotFoundError",
    "MalformedRunError",
    "ArtifactNotFoundError",
    "ArtifactBuildError",
    "ReconciliationError",
    "AlreadyProcessedError",
    "UpgradeNotConfirmedError",
    "UnexpectedProxyError",
    "DuplicateNonUpgradeableError",
    "ConstructorArityMismatchError",
    "AmbiguousContractNameError",
    "OracleUnavailableError",
]
