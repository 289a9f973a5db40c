"""Forge compilation artifacts for forge-chronicles library."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ArtifactBuildError, ArtifactNotFoundError, ConstructorArityMismatchError

logger = logging.getLogger(__name__)


def prepare_artifacts(project_root: Path) -> None:
    """
    Run `forge build` so ABIs under ./out match the sources.

    Args:
        project_root: Foundry project root

    Raises:
        ArtifactBuildError: If forge is missing or the build fails
    """
    logger.info("Running forge build in %s", project_root)
    try:
        subprocess.run(
            ["forge", "build"],
            cwd=project_root,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise ArtifactBuildError("forge not found; install Foundry (https://getfoundry.sh)") from e
    except subprocess.CalledProcessError as e:
        raise ArtifactBuildError(f"forge build failed: {e.stderr}") from e


def load_abi(contract_name: str, artifacts_dir: Path) -> List[Dict[str, Any]]:
    """
    Load the ABI of a contract from forge output.

    Args:
        contract_name: Contract name, also the source file stem
        artifacts_dir: Forge output directory (./out)

    Returns:
        ABI as a list of fragment dicts

    Raises:
        ArtifactNotFoundError: If out/{name}.sol/{name}.json does not exist
    """
    artifact_path = artifacts_dir / f"{contract_name}.sol" / f"{contract_name}.json"
    try:
        with open(artifact_path, encoding="utf-8") as f:
            return json.load(f)["abi"]
    except FileNotFoundError as e:
        raise ArtifactNotFoundError(
            f"Artifact for {contract_name} not found at {artifact_path}"
        ) from e


def match_constructor_inputs(
    abi: List[Dict[str, Any]],
    arguments: Optional[List[Any]],
    contract_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Pair declared constructor parameter names with positional argument values.

    Args:
        abi: Contract ABI
        arguments: Constructor argument values from the creation event
        contract_name: Used in the error message

    Returns:
        Mapping of parameter name to value, in declared order.
        Empty if the ABI has no constructor or no arguments were supplied.

    Raises:
        ConstructorArityMismatchError: If parameter and argument counts differ
    """
    constructor = next((item for item in abi if item.get("type") == "constructor"), None)
    if constructor is None or not arguments:
        return {}

    inputs = constructor.get("inputs", [])
    if len(inputs) != len(arguments):
        raise ConstructorArityMismatchError(
            f"Couldn't match constructor inputs of {contract_name}: "
            f"ABI declares {len(inputs)}, run supplied {len(arguments)}",
            contract_name=contract_name,
        )

    return {param["name"]: value for param, value in zip(inputs, arguments)}
