"""Main API for forge-chronicles library."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from .artifacts import load_abi, prepare_artifacts
from .constants import DEFAULT_SCRIPT_NAME, RPC_URL_ENV
from .exceptions import LedgerNotFoundError
from .ledger import load_ledger, save_ledger
from .oracle import ChainOracle
from .parsers import load_run
from .paths import get_artifacts_dir, get_broadcast_path, get_ledger_paths, get_project_root
from .reconcile import ReconcileOptions, check_not_processed, reconcile
from .report import save_markdown
from .types import Ledger

logger = logging.getLogger(__name__)


def extract_and_save_ledger(
    chain_id: int,
    script_name: str = DEFAULT_SCRIPT_NAME,
    rpc_url: Optional[str] = None,
    force: bool = False,
    project_root: Optional[Union[Path, str]] = None,
    build: bool = True,
    oracle: Optional[ChainOracle] = None,
) -> Ledger:
    """
    Merge the latest broadcast of a script into the chain ledger.

    Reads broadcast/{script_name}/{chain_id}/run-latest.json and updates
    deployments/json/{chain_id}.json. The ledger file is written only if
    reconciliation succeeds.

    Args:
        chain_id: Chain the script was broadcast to
        script_name: Deployment script file name
        rpc_url: RPC URL for version reads and upgrade confirmation (defaults to $RPC_URL)
        force: Reprocess a commit that is already the most recent one
        project_root: Foundry project root (defaults to current directory)
        build: Run `forge build` before reading ABIs
        oracle: On-chain reader (defaults to ChainOracle(rpc_url))

    Returns:
        The updated ledger

    Raises:
        RunNotFoundError: If the broadcast file does not exist
        ReconciliationError: If the run cannot be merged (ledger left untouched)
        ArtifactBuildError: If `forge build` fails
    """
    if rpc_url is None:
        rpc_url = os.environ.get(RPC_URL_ENV)
    if oracle is None:
        oracle = ChainOracle(rpc_url)

    root = get_project_root(project_root)
    ledger_path, _ = get_ledger_paths(chain_id, root)

    run = load_run(get_broadcast_path(script_name, chain_id, root))
    ledger = load_ledger(ledger_path, chain_id)

    # Fail before building when the commit was already processed
    check_not_processed(ledger, run, force)

    if build:
        prepare_artifacts(root)
    artifacts_dir = get_artifacts_dir(root)

    result = reconcile(
        ledger,
        run,
        oracle,
        lambda contract_name: load_abi(contract_name, artifacts_dir),
        ReconcileOptions(force=force),
    )
    updated = result.unwrap()

    save_ledger(updated, ledger_path)
    logger.info(
        "Recorded commit %s (%d contracts) in %s",
        run.commit_hash,
        len(updated.history[0].contracts),
        ledger_path,
    )
    return updated


def generate_report(
    chain_id: int,
    project_root: Optional[Union[Path, str]] = None,
    ledger: Optional[Ledger] = None,
    project_url: Optional[str] = None,
) -> Path:
    """
    Render the chain ledger to deployments/{chain_id}.md.

    Args:
        chain_id: Chain id
        project_root: Foundry project root (defaults to current directory)
        ledger: Ledger to render (defaults to the one saved for chain_id)
        project_url: Project URL for links (defaults to the git origin)

    Returns:
        Path of the written report

    Raises:
        LedgerNotFoundError: If no ledger is given and none is saved
    """
    ledger_path, report_path = get_ledger_paths(chain_id, project_root)

    if ledger is None:
        if not ledger_path.exists():
            raise LedgerNotFoundError(f"Ledger not found at {ledger_path}")
        ledger = load_ledger(ledger_path, chain_id)

    return save_markdown(ledger, report_path, project_url)
