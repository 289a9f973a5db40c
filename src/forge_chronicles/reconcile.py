"""Reconciliation of a deployment run against a chain ledger."""

import copy
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set

from .artifacts import match_constructor_inputs
from .exceptions import (
    AlreadyProcessedError,
    AmbiguousContractNameError,
    DuplicateNonUpgradeableError,
    ReconciliationError,
    UnexpectedProxyError,
    UpgradeNotConfirmedError,
)
from .oracle import ChainOracle
from .types import (
    ContractInput,
    ContractSnapshot,
    CreationEvent,
    DeploymentRun,
    HistoryEntry,
    Ledger,
    LedgerEntry,
    NonUpgradeableEntry,
    UpgradeableEntry,
)

logger = logging.getLogger(__name__)

# (contract_name) -> ABI
AbiLookup = Callable[[str], List[Dict[str, Any]]]


@dataclass
class ReconcileOptions:
    """
    Reconciliation switches.

    Attributes:
        force: Reprocess a run whose commit is already the most recent one
        verify_upgrades: Require the proxy's implementation slot to point at
                         a new implementation before recording the upgrade
    """

    force: bool = False
    verify_upgrades: bool = True


@dataclass
class ReconciliationResult:
    """
    Outcome of reconcile().

    On success `ledger` is the updated ledger and `error` is None. On failure
    `ledger` is the untouched input ledger and `error` says why.
    """

    ledger: Ledger
    error: Optional[ReconciliationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Ledger:
        """Return the updated ledger or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.ledger


def check_not_processed(ledger: Ledger, run: DeploymentRun, force: bool = False) -> None:
    """
    Refuse a run whose commit matches the most recent history entry.

    Raises:
        AlreadyProcessedError: Unless force is set
    """
    most_recent = ledger.most_recent
    if most_recent is not None and most_recent.commit_hash == run.commit_hash and not force:
        raise AlreadyProcessedError(f"Commit {run.commit_hash} already processed")


def pair_implementations(events: List[CreationEvent]) -> Dict[int, int]:
    """
    Pair implementation events with the proxy events that wrap them.

    A proxy wraps the address given as its first constructor argument and
    must come after the implementation in the run. When several proxies wrap
    the same implementation the last one wins.

    Args:
        events: Creation events in broadcast order

    Returns:
        Mapping of implementation event position to proxy event position
    """
    proxies_by_implementation: Dict[str, List[int]] = {}
    for position, event in enumerate(events):
        if event.is_proxy and event.wrapped_implementation is not None:
            key = str(event.wrapped_implementation).lower()
            proxies_by_implementation.setdefault(key, []).append(position)

    pairs: Dict[int, int] = {}
    for position, event in enumerate(events):
        if event.is_proxy or event.contract_name is None:
            continue
        candidates = proxies_by_implementation.get(event.contract_address.lower(), [])
        later = [p for p in candidates if p > position]
        if later:
            pairs[position] = later[-1]

    return pairs


class _RunReconciler:
    """Walks one run against a working copy of the ledger."""

    def __init__(
        self,
        ledger: Ledger,
        run: DeploymentRun,
        oracle: ChainOracle,
        abi_lookup: AbiLookup,
        options: ReconcileOptions,
    ):
        self.ledger = ledger
        self.run = run
        self.oracle = oracle
        self.abi_lookup = abi_lookup
        self.options = options
        self.contracts: Dict[str, ContractSnapshot] = {}
        self.claimed_proxies: Set[int] = set()

    def reconcile(self) -> Ledger:
        events = self.run.creation_events
        pairs = pair_implementations(events)

        for position, event in enumerate(events):
            name = event.contract_name
            if name is None:
                raise AmbiguousContractNameError(
                    f"Contract name not unique for creation at {event.contract_address}",
                    address=event.contract_address,
                )

            if event.is_proxy:
                self._check_proxy_attributed(event, position)
                continue

            existing = self.ledger.latest.get(name)
            if existing is None:
                proxy_position = pairs.get(position)
                if proxy_position is None:
                    snapshot = self._new_non_upgradeable(event)
                else:
                    self.claimed_proxies.add(proxy_position)
                    snapshot = self._new_upgradeable(event, events[proxy_position])
            elif existing.proxy:
                snapshot = self._new_implementation(event, existing)
            else:
                raise DuplicateNonUpgradeableError(
                    f"{name} is already deployed at {existing.address} without a proxy; "
                    f"refusing to record {event.contract_address}",
                    contract_name=name,
                    address=event.contract_address,
                )

            self.contracts[name] = snapshot
            self.ledger.latest[name] = self._stamp(snapshot.entry)

        self.ledger.history.insert(
            0,
            HistoryEntry(
                commit_hash=self.run.commit_hash,
                timestamp=self.run.timestamp,
                contracts=self.contracts,
            ),
        )
        return self.ledger

    def _stamp(self, entry: LedgerEntry) -> LedgerEntry:
        return dataclasses.replace(
            entry, timestamp=self.run.timestamp, commit_hash=self.run.commit_hash
        )

    def _constructor_input(self, event: CreationEvent) -> Dict[str, Any]:
        abi = self.abi_lookup(event.contract_name)
        return match_constructor_inputs(abi, event.arguments, event.contract_name)

    def _check_proxy_attributed(self, event: CreationEvent, position: int) -> None:
        if position in self.claimed_proxies:
            return
        if self.ledger.find_by_address(event.contract_address) is not None:
            return
        raise UnexpectedProxyError(
            f"Unexpected proxy {event.contract_address}",
            contract_name=event.contract_name,
            address=event.contract_address,
        )

    def _new_non_upgradeable(self, event: CreationEvent) -> ContractSnapshot:
        logger.info("%s: new contract at %s", event.contract_name, event.contract_address)
        entry = NonUpgradeableEntry(
            address=event.contract_address,
            deployment_txn=event.transaction_hash,
            version=self.oracle.read_version(event.contract_address),
        )
        return ContractSnapshot(entry=entry, input=ContractInput(self._constructor_input(event)))

    def _new_upgradeable(self, event: CreationEvent, proxy: CreationEvent) -> ContractSnapshot:
        logger.info(
            "%s: new proxy %s with implementation %s",
            event.contract_name,
            proxy.contract_address,
            event.contract_address,
        )
        entry = UpgradeableEntry(
            address=proxy.contract_address,
            implementation=event.contract_address,
            proxy_admin=proxy.proxy_admin_address,
            deployment_txn=proxy.transaction_hash,
            proxy_type=proxy.contract_name,
            version=self.oracle.read_version(proxy.contract_address),
        )
        return ContractSnapshot(
            entry=entry,
            input=ContractInput(
                constructor=self._constructor_input(event),
                initialize_data=proxy.init_data,
            ),
        )

    def _new_implementation(
        self, event: CreationEvent, existing: UpgradeableEntry
    ) -> ContractSnapshot:
        if self.options.verify_upgrades:
            on_chain = self.oracle.read_implementation(existing.address)
            if on_chain is None or on_chain.lower() != event.contract_address.lower():
                raise UpgradeNotConfirmedError(
                    f"{event.contract_name} not upgraded to {event.contract_address} "
                    f"(proxy {existing.address} points at {on_chain})",
                    contract_name=event.contract_name,
                    address=event.contract_address,
                )

        logger.info(
            "%s: proxy %s upgraded to %s",
            event.contract_name,
            existing.address,
            event.contract_address,
        )
        entry = UpgradeableEntry(
            address=existing.address,
            implementation=event.contract_address,
            proxy_admin=existing.proxy_admin,
            deployment_txn=existing.deployment_txn,
            proxy_type=existing.proxy_type,
            version=self.oracle.read_version(existing.address),
        )
        return ContractSnapshot(entry=entry, input=ContractInput(self._constructor_input(event)))


def reconcile(
    ledger: Ledger,
    run: DeploymentRun,
    oracle: ChainOracle,
    abi_lookup: AbiLookup,
    options: Optional[ReconcileOptions] = None,
) -> ReconciliationResult:
    """
    Merge a deployment run into a chain ledger.

    The input ledger is never modified; the updated ledger is a copy with
    `latest` updated and one history entry prepended.

    Args:
        ledger: Current chain ledger
        run: Deployment run to merge
        oracle: On-chain reads for versions and upgrade confirmation
        abi_lookup: Returns the ABI of a contract by name
        options: Reconciliation switches (defaults to ReconcileOptions())

    Returns:
        ReconciliationResult carrying either the updated ledger or the error

    Raises:
        ArtifactNotFoundError: If an ABI cannot be loaded
    """
    if options is None:
        options = ReconcileOptions()

    try:
        check_not_processed(ledger, run, options.force)
        reconciler = _RunReconciler(copy.deepcopy(ledger), run, oracle, abi_lookup, options)
        updated = reconciler.reconcile()
    except ReconciliationError as e:
        logger.debug("Reconciliation of commit %s failed: %s", run.commit_hash, e)
        return ReconciliationResult(ledger=ledger, error=e)

    return ReconciliationResult(ledger=updated)
