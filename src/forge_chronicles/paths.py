"""Path management utilities for forge-chronicles library."""

from pathlib import Path
from typing import Optional, Union


def get_project_root(project_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Get the Foundry project root.

    Args:
        project_root: Custom project root (defaults to current working directory)

    Returns:
        Absolute path to the project root
    """
    if project_root is None:
        return Path.cwd()
    return Path(project_root).absolute()


def get_broadcast_path(
    script_name: str, chain_id: int, project_root: Optional[Union[Path, str]] = None
) -> Path:
    """
    Get the latest broadcast file of a script on a chain.

    Returns:
        Path to broadcast/{script_name}/{chain_id}/run-latest.json
    """
    root = get_project_root(project_root)
    return root / "broadcast" / script_name / str(chain_id) / "run-latest.json"


def get_ledger_paths(
    chain_id: int, project_root: Optional[Union[Path, str]] = None
) -> tuple[Path, Path]:
    """
    Get chain-scoped output paths.

    Returns:
        Tuple of (ledger_json_path, report_markdown_path):
        deployments/json/{chain_id}.json and deployments/{chain_id}.md
    """
    deployments_dir = get_project_root(project_root) / "deployments"

    ledger_path = deployments_dir / "json" / f"{chain_id}.json"
    report_path = deployments_dir / f"{chain_id}.md"

    return (ledger_path, report_path)


def get_artifacts_dir(project_root: Optional[Union[Path, str]] = None) -> Path:
    """Get the forge build output directory (./out)."""
    return get_project_root(project_root) / "out"
