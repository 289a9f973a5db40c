"""Broadcast file parsers for forge-chronicles library."""

import json
from pathlib import Path
from typing import Any, Dict, List

from .exceptions import MalformedRunError, RunNotFoundError
from .types import CreationEvent, DeploymentRun

CREATE_TRANSACTION = "CREATE"


def parse_creation_event(transaction: Dict[str, Any]) -> CreationEvent:
    """
    Convert a broadcast transaction into a creation event.

    Args:
        transaction: Entry of the broadcast `transactions` list

    Returns:
        CreationEvent with arguments and additional contracts defaulted to empty lists

    Raises:
        MalformedRunError: If the contract address or transaction hash is missing
    """
    try:
        address = transaction["contractAddress"]
        tx_hash = transaction["hash"]
    except KeyError as e:
        raise MalformedRunError(f"CREATE transaction missing field {e}") from e

    return CreationEvent(
        contract_name=transaction.get("contractName"),
        contract_address=address,
        transaction_hash=tx_hash,
        # forge writes null for constructors without arguments
        arguments=list(transaction.get("arguments") or []),
        additional_contracts=list(transaction.get("additionalContracts") or []),
    )


def parse_broadcast(data: Dict[str, Any]) -> DeploymentRun:
    """
    Parse a Foundry broadcast document.

    Only CREATE transactions are kept, in the order they were broadcast.

    Args:
        data: Decoded run-latest.json

    Returns:
        DeploymentRun

    Raises:
        MalformedRunError: If commit, timestamp or transactions are missing
    """
    missing = [key for key in ("commit", "timestamp", "transactions") if key not in data]
    if missing:
        raise MalformedRunError(f"Broadcast file missing required fields: {', '.join(missing)}")

    transactions: List[Dict[str, Any]] = data["transactions"]
    events = [
        parse_creation_event(tx)
        for tx in transactions
        if tx.get("transactionType") == CREATE_TRANSACTION
    ]

    return DeploymentRun(
        commit_hash=data["commit"],
        timestamp=data["timestamp"],
        creation_events=events,
    )


def load_run(file_path: Path) -> DeploymentRun:
    """
    Load a deployment run from a broadcast file.

    Args:
        file_path: Path to run-latest.json

    Returns:
        DeploymentRun

    Raises:
        RunNotFoundError: If the file does not exist
        MalformedRunError: If the file is not valid JSON or lacks required fields
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise RunNotFoundError(f"Broadcast file not found at {file_path}") from e
    except json.JSONDecodeError as e:
        raise MalformedRunError(f"Broadcast file {file_path} is not valid JSON: {e}") from e

    return parse_broadcast(data)
