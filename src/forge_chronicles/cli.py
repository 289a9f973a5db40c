"""
forge-chronicles command line.

Usage:
    forge-chronicles [SCRIPT_NAME] -c CHAIN_ID [-r RPC_URL] [-s] [-f]

Extracts contract deployments from broadcast/{SCRIPT_NAME}/{CHAIN_ID}/run-latest.json
into deployments/json/{CHAIN_ID}.json and renders deployments/{CHAIN_ID}.md.

Exit codes:
    0  Ledger and report written
    1  Run rejected or files missing (ledger left untouched)
    2  Usage error
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .chronicle import extract_and_save_ledger, generate_report
from .constants import DEFAULT_SCRIPT_NAME, RPC_URL_ENV
from .exceptions import ChronicleError

logger = logging.getLogger(__name__)


@click.command(name="forge-chronicles")
@click.argument("script_name", default=DEFAULT_SCRIPT_NAME)
@click.option(
    "-c",
    "--chain-id",
    type=int,
    required=True,
    help="Chain id of the network where the script was executed.",
)
@click.option(
    "-r",
    "--rpc-url",
    envvar=RPC_URL_ENV,
    default=None,
    help=(
        "RPC url used to fetch contract versions and verify upgrades "
        f"(default: ${RPC_URL_ENV}). Without it version fetching is skipped."
    ),
)
@click.option(
    "-s",
    "--skip-json",
    is_flag=True,
    help="Skip ledger generation and render the markdown from the existing ledger.",
)
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Reprocess a commit that was already recorded. Do not use in production.",
)
@click.option("--no-build", is_flag=True, help="Do not run `forge build` before reading ABIs.")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Foundry project root (default: current directory).",
)
@click.option("--project-url", default=None, help="Project URL for links (default: git origin).")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(None, "-v", "--version", package_name="forge-chronicles")
def main(
    script_name: str,
    chain_id: int,
    rpc_url: Optional[str],
    skip_json: bool,
    force: bool,
    no_build: bool,
    root: Optional[Path],
    project_url: Optional[str],
    verbose: bool,
) -> None:
    """Record the deployments of SCRIPT_NAME (default: Deploy.s.sol)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if rpc_url is None:
        logger.warning("No RPC URL provided, skipping version fetching")

    try:
        if skip_json:
            logger.info("Skipping json extraction, using existing json file")
            ledger = None
        else:
            ledger = extract_and_save_ledger(
                chain_id,
                script_name=script_name,
                rpc_url=rpc_url,
                force=force,
                project_root=root,
                build=not no_build,
            )
        report_path = generate_report(chain_id, root, ledger=ledger, project_url=project_url)
    except (ChronicleError, RuntimeError) as e:
        click.echo(f"Error: {e}. Aborted.", err=True)
        sys.exit(1)

    click.echo(f"Generation complete! {report_path}")


if __name__ == "__main__":
    main()
