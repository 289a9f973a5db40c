"""Custom exception classes for forge-chronicles library."""

from typing import Optional


class ChronicleError(Exception):
    """Base exception for forge-chronicles errors."""

    pass


class LedgerNotFoundError(ChronicleError, FileNotFoundError):
    """Raised when a chain ledger file is required but does not exist."""

    pass


class LedgerCorruptedError(ChronicleError, ValueError):
    """Raised when a chain ledger file exists but cannot be parsed."""

    pass


class RunNotFoundError(ChronicleError, FileNotFoundError):
    """Raised when the broadcast file of a deployment run is not found."""

    pass


class MalformedRunError(ChronicleError, ValueError):
    """Raised when a broadcast file is missing commit, timestamp or transactions."""

    pass


class ArtifactNotFoundError(ChronicleError, FileNotFoundError):
    """Raised when a compilation artifact (ABI) is missing for a contract."""

    pass


class ArtifactBuildError(ChronicleError, RuntimeError):
    """Raised when `forge build` fails or forge is not installed."""

    pass


class ReconciliationError(ChronicleError):
    """
    Base exception for failures that abort reconciliation of a run.

    Attributes:
        contract_name: Offending contract name, if known
        address: Offending address, if known
    """

    def __init__(
        self,
        message: str,
        contract_name: Optional[str] = None,
        address: Optional[str] = None,
    ):
        super().__init__(message)
        self.contract_name = contract_name
        self.address = address


class AlreadyProcessedError(ReconciliationError):
    """Raised when the run's commit matches the most recent history entry."""

    pass


class UpgradeNotConfirmedError(ReconciliationError):
    """Raised when a proxy's implementation slot does not point at the new implementation."""

    pass


class UnexpectedProxyError(ReconciliationError):
    """Raised when a proxy deployment cannot be attributed to a tracked contract."""

    pass


class DuplicateNonUpgradeableError(ReconciliationError):
    """Raised when a non-upgradeable contract name is deployed a second time."""

    pass


class ConstructorArityMismatchError(ReconciliationError, ValueError):
    """Raised when constructor arguments do not match the declared ABI inputs."""

    pass


class AmbiguousContractNameError(ReconciliationError, ValueError):
    """Raised when the deploy tool could not attribute a creation to a unique contract name."""

    pass


class OracleUnavailableError(ReconciliationError, RuntimeError):
    """Raised when an on-chain read is required but no RPC endpoint is configured."""

    pass
