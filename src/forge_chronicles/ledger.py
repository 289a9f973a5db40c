"""Chain ledger persistence for forge-chronicles library."""

import json
import os
import tempfile
from pathlib import Path

from .exceptions import LedgerCorruptedError
from .types import Ledger


def load_ledger(ledger_path: Path, chain_id: int) -> Ledger:
    """
    Load a chain ledger or start an empty one.

    Args:
        ledger_path: Path to deployments/json/{chain_id}.json
        chain_id: Chain the ledger belongs to

    Returns:
        Ledger; empty ledger for chain_id if the file doesn't exist

    Raises:
        LedgerCorruptedError: If the file exists but is not a valid ledger
    """
    try:
        with open(ledger_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return Ledger(chain_id=chain_id)
    except json.JSONDecodeError as e:
        raise LedgerCorruptedError(f"Ledger {ledger_path} is not valid JSON: {e}") from e

    try:
        return Ledger.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise LedgerCorruptedError(f"Ledger {ledger_path} is malformed: {e!r}") from e


def save_ledger(ledger: Ledger, ledger_path: Path) -> None:
    """
    Save a chain ledger to disk.

    The file is written next to its destination and moved into place, so a
    failed write leaves any previous ledger untouched.

    Args:
        ledger: Ledger to save
        ledger_path: Path to deployments/json/{chain_id}.json

    Creates parent directories if they don't exist.
    """
    ledger_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=ledger_path.parent, prefix=f".{ledger_path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(ledger.to_dict(), f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, ledger_path)
    except BaseException:
        os.unlink(tmp_name)
        raise
