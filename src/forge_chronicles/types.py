"""Data types and dataclasses for forge-chronicles library."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Union

from .constants import PROXY_CONTRACT_NAME


@dataclass
class CreationEvent:
    """A CREATE transaction from a deployment run."""

    contract_name: Optional[str]  # None when the deploy tool could not name it
    contract_address: str
    transaction_hash: str
    arguments: List[Any] = field(default_factory=list)
    additional_contracts: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_proxy(self) -> bool:
        return self.contract_name == PROXY_CONTRACT_NAME

    @property
    def wrapped_implementation(self) -> Optional[str]:
        """Implementation address a proxy wraps (first constructor argument)."""
        return self.arguments[0] if self.arguments else None

    @property
    def proxy_admin_address(self) -> Optional[str]:
        """Address of the admin contract created alongside a proxy."""
        if not self.additional_contracts:
            return None
        return self.additional_contracts[0].get("address")

    @property
    def init_data(self) -> Optional[str]:
        """Encoded initializer call passed to a proxy (third constructor argument)."""
        return self.arguments[2] if len(self.arguments) > 2 else None


@dataclass
class DeploymentRun:
    """One broadcast of a deployment script."""

    commit_hash: str
    timestamp: int  # Unix timestamp
    creation_events: List[CreationEvent] = field(default_factory=list)


@dataclass
class ContractInput:
    """Constructor (and proxy initializer) arguments of a deployment."""

    constructor: Dict[str, Any] = field(default_factory=dict)
    initialize_data: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"constructor": dict(self.constructor)}
        if self.initialize_data is not None:
            result["initializeData"] = self.initialize_data
        return result

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ContractInput":
        return ContractInput(
            constructor=dict(data.get("constructor", {})),
            initialize_data=data.get("initializeData"),
        )


@dataclass
class NonUpgradeableEntry:
    """A contract deployed without a proxy."""

    proxy: ClassVar[bool] = False

    address: str
    deployment_txn: str
    version: Optional[str] = None
    # Stamped on "latest" entries only; history snapshots inherit them from their run
    timestamp: Optional[int] = None
    commit_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"address": self.address, "proxy": False}
        if self.version is not None:
            result["version"] = self.version
        result["deploymentTxn"] = self.deployment_txn
        _add_stamp(result, self)
        return result


@dataclass
class UpgradeableEntry:
    """A contract behind a proxy. `address` is the proxy and never changes."""

    proxy: ClassVar[bool] = True

    address: str
    implementation: str
    proxy_admin: Optional[str]
    deployment_txn: str  # Transaction that created the proxy
    proxy_type: str = PROXY_CONTRACT_NAME
    version: Optional[str] = None
    timestamp: Optional[int] = None
    commit_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "implementation": self.implementation,
            "address": self.address,
            "proxy": True,
        }
        if self.version is not None:
            result["version"] = self.version
        result["proxyType"] = self.proxy_type
        result["deploymentTxn"] = self.deployment_txn
        result["proxyAdmin"] = self.proxy_admin
        _add_stamp(result, self)
        return result


LedgerEntry = Union[NonUpgradeableEntry, UpgradeableEntry]


def _add_stamp(result: Dict[str, Any], entry: LedgerEntry) -> None:
    if entry.timestamp is not None:
        result["timestamp"] = entry.timestamp
    if entry.commit_hash is not None:
        result["commitHash"] = entry.commit_hash


def entry_from_dict(data: Dict[str, Any]) -> LedgerEntry:
    """Build the ledger entry variant selected by the `proxy` flag."""
    if data.get("proxy"):
        return UpgradeableEntry(
            address=data["address"],
            implementation=data["implementation"],
            proxy_admin=data.get("proxyAdmin"),
            deployment_txn=data["deploymentTxn"],
            proxy_type=data.get("proxyType", PROXY_CONTRACT_NAME),
            version=data.get("version"),
            timestamp=data.get("timestamp"),
            commit_hash=data.get("commitHash"),
        )
    return NonUpgradeableEntry(
        address=data["address"],
        deployment_txn=data["deploymentTxn"],
        version=data.get("version"),
        timestamp=data.get("timestamp"),
        commit_hash=data.get("commitHash"),
    )


@dataclass
class ContractSnapshot:
    """A ledger entry as recorded in a history entry, with its inputs."""

    entry: LedgerEntry
    input: ContractInput = field(default_factory=ContractInput)

    def to_dict(self) -> Dict[str, Any]:
        result = self.entry.to_dict()
        result["input"] = self.input.to_dict()
        return result

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ContractSnapshot":
        return ContractSnapshot(
            entry=entry_from_dict(data),
            input=ContractInput.from_dict(data.get("input", {})),
        )


@dataclass
class HistoryEntry:
    """Contracts created by one processed run."""

    commit_hash: str
    timestamp: int
    contracts: Dict[str, ContractSnapshot] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contracts": {name: s.to_dict() for name, s in self.contracts.items()},
            "timestamp": self.timestamp,
            "commitHash": self.commit_hash,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "HistoryEntry":
        return HistoryEntry(
            commit_hash=data["commitHash"],
            timestamp=data["timestamp"],
            contracts={
                name: ContractSnapshot.from_dict(s)
                for name, s in data.get("contracts", {}).items()
            },
        )


@dataclass
class Ledger:
    """
    Deployment record of one chain.

    `latest` is the materialized result of applying `history` oldest to newest.
    `history` is ordered newest first.
    """

    chain_id: int
    latest: Dict[str, LedgerEntry] = field(default_factory=dict)
    history: List[HistoryEntry] = field(default_factory=list)

    @property
    def most_recent(self) -> Optional[HistoryEntry]:
        return self.history[0] if self.history else None

    def find_by_address(self, address: str) -> Optional[str]:
        """Return the name of the `latest` entry at `address`, if any."""
        for name, entry in self.latest.items():
            if entry.address.lower() == address.lower():
                return name
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "latest": {name: e.to_dict() for name, e in self.latest.items()},
            "history": [h.to_dict() for h in self.history],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Ledger":
        return Ledger(
            chain_id=int(data["chainId"]),
            latest={name: entry_from_dict(e) for name, e in data.get("latest", {}).items()},
            history=[HistoryEntry.from_dict(h) for h in data.get("history", [])],
        )
