"""Markdown report rendering for forge-chronicles library."""

import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import CHAIN_EXPLORERS, FALLBACK_EXPLORER, LOCAL_CHAIN_ID
from .timestamps import format_date, format_utc
from .types import ContractSnapshot, HistoryEntry, Ledger, LedgerEntry
from .versions import highest_version

logger = logging.getLogger(__name__)

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
TRANSACTION_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_address(value: object) -> bool:
    return isinstance(value, str) and bool(ADDRESS_RE.match(value))


def is_transaction(value: object) -> bool:
    return isinstance(value, str) and bool(TRANSACTION_RE.match(value))


def explorer_link(chain_id: int, value: str, kind: str = "address") -> str:
    """
    Build a block explorer URL for an address or transaction.

    Args:
        chain_id: Chain id
        value: Address or transaction hash
        kind: "address" or "tx"

    Returns:
        URL, or "" for the local chain which has no explorer
    """
    if chain_id == LOCAL_CHAIN_ID:
        return ""
    base = CHAIN_EXPLORERS.get(chain_id, FALLBACK_EXPLORER)
    return f"{base}/{kind}/{value}"


def _link_md(chain_id: int, value: str, kind: str = "address") -> str:
    url = explorer_link(chain_id, value, kind)
    return f"[{value}]({url})" if url else value


def _link_html(chain_id: int, value: str, kind: str = "address") -> str:
    url = explorer_link(chain_id, value, kind)
    return f'<a href="{url}" target="_blank">{value}</a>' if url else value


def split_camel_case(name: str) -> str:
    """"StakeRegistry" -> "Stake Registry"."""
    return re.sub(r"([A-Z])", r" \1", name).strip()


def heading_anchor(heading: str) -> str:
    """GitHub-style anchor of a markdown heading."""
    slug = re.sub(r"[^\w\- ]", "", heading.strip().lower())
    return slug.replace(" ", "-")


def get_project_url(project_root: Optional[Path] = None) -> str:
    """
    Get the browsable URL of the project from `git remote get-url origin`.

    SSH remotes (git@host:org/repo.git) are converted to https URLs.
    """
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=project_root,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise RuntimeError("git is not installed, pass the project URL explicitly") from e
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"Failed to get git remote: {e.stderr}") from e

    url = result.stdout.strip()
    if url.startswith("git@"):
        host, _, path = url[len("git@"):].partition(":")
        url = f"https://{host}/{path}"
    return re.sub(r"\.git$", "", url)


def project_name_from_url(project_url: str) -> str:
    """Last path segment of the project URL."""
    return project_url.rstrip("/").rsplit("/", 1)[-1]


class MarkdownRenderer:
    """Renders a chain ledger as a markdown document."""

    def __init__(self, ledger: Ledger, project_url: str, project_name: Optional[str] = None):
        self.ledger = ledger
        self.chain_id = ledger.chain_id
        self.project_url = project_url
        self.project_name = project_name or project_name_from_url(project_url)

    def _release_link(self, version: str) -> str:
        return f"{self.project_url}/releases/tag/{version}"

    def _commit_link(self, commit_hash: str) -> str:
        return f"[{commit_hash[:7]}]({self.project_url}/commit/{commit_hash})"

    def _history_groups(self) -> List[Tuple[str, Optional[str], HistoryEntry]]:
        """(title, highest version or None, entry) for each history entry, newest first."""
        groups = []
        for entry in self.ledger.history:
            highest = highest_version(s.entry.version for s in entry.contracts.values())
            title = highest if highest is not None else format_date(entry.timestamp)
            groups.append((title, highest, entry))
        return groups

    def render(self) -> str:
        groups = self._history_groups()
        lines = [f"# {self.project_name}", ""]
        lines += self._table_of_contents(groups)
        lines += self._summary()
        lines += ["## Contracts", ""]

        sections = [self._contract_section(name, e) for name, e in self.ledger.latest.items()]
        for i, section in enumerate(sections):
            if i:
                lines += ["---", ""]
            lines += section

        lines += ["----", "", "## Deployment History", ""]
        for title, highest, entry in groups:
            lines += self._history_section(title, highest, entry)

        return "\n".join(lines).rstrip() + "\n"

    def _table_of_contents(self, groups: List[Tuple[str, Optional[str], HistoryEntry]]) -> List[str]:
        lines = ["### Table of Contents", "- [Summary](#summary)", "- [Contracts](#contracts)"]
        for name in self.ledger.latest:
            display = split_camel_case(name)
            lines.append(f"\t- [{display}](#{heading_anchor(display)})")
        lines.append("- [Deployment History](#deployment-history)")
        for title, _, _ in groups:
            lines.append(f"\t- [{title}](#{heading_anchor(title)})")
        lines.append("")
        return lines

    def _summary(self) -> List[str]:
        lines = [
            "## Summary",
            "<table>",
            "<tr>",
            "    <th>Contract</th>",
            "    <th>Address</th>",
            "    <th>Version</th>",
            "</tr>",
        ]
        for name, entry in self.ledger.latest.items():
            lines += [
                "<tr>",
                f"    <td>{name}</td>",
                f"    <td>{_link_html(self.chain_id, entry.address)}</td>",
                f"    <td>{entry.version or 'N/A'}</td>",
                "</tr>",
            ]
        lines += ["</table>", ""]
        return lines

    def _contract_section(self, name: str, entry: LedgerEntry) -> List[str]:
        lines = [
            f"### {split_camel_case(name)}",
            "",
            f"Address: {_link_md(self.chain_id, entry.address)}",
            "",
            f"Deployment Txn: {_link_md(self.chain_id, entry.deployment_txn, 'tx')}",
            "",
        ]
        if entry.version is not None:
            lines += [f"Version: [{entry.version}]({self._release_link(entry.version)})", ""]
        if entry.commit_hash:
            lines += [f"Commit Hash: {self._commit_link(entry.commit_hash)}", ""]
        if entry.timestamp is not None:
            lines += [format_utc(entry.timestamp), ""]
        if entry.proxy:
            lines += self._proxy_information(name, entry)
        return lines

    def _proxy_information(self, name: str, entry: LedgerEntry) -> List[str]:
        lines = [
            "_Proxy Information_",
            "",
            f"Proxy Type: {entry.proxy_type}",
            "",
            f"Implementation: {_link_md(self.chain_id, entry.implementation)}",
            "",
            f"Proxy Admin: {_link_md(self.chain_id, entry.proxy_admin or 'N/A')}",
            "",
        ]

        rows = []
        for history_entry in self.ledger.history:
            snapshot = history_entry.contracts.get(name)
            if snapshot is None or snapshot.entry.address != entry.address:
                continue
            version = snapshot.entry.version
            version_cell = (
                f'<a href="{self._release_link(version)}" target="_blank">{version}</a>'
                if version
                else "N/A"
            )
            commit = history_entry.commit_hash
            rows += [
                "    <tr>",
                f"        <td>{version_cell}</td>",
                f"        <td>{_link_html(self.chain_id, snapshot.entry.implementation)}</td>",
                f'        <td><a href="{self.project_url}/commit/{commit}" target="_blank">{commit[:7]}</a></td>',
                "    </tr>",
            ]
        if not rows:
            return lines

        lines += [
            "<details>",
            "<summary>Implementation History</summary>",
            "<table>",
            "    <tr>",
            "        <th>Version</th>",
            "        <th>Address</th>",
            "        <th>Commit Hash</th>",
            "    </tr>",
        ]
        lines += rows
        lines += ["</table>", "</details>", ""]
        return lines

    def _history_section(self, title: str, highest: Optional[str], entry: HistoryEntry) -> List[str]:
        heading = f"[{title}]({self._release_link(title)})" if highest is not None else title
        lines = [
            f"### {heading}",
            "",
            format_utc(entry.timestamp),
            "",
            f"Commit Hash: {self._commit_link(entry.commit_hash)}",
            "",
            "Deployed contracts:",
            "",
        ]
        for name, snapshot in entry.contracts.items():
            lines += self._deployed_contract(name, snapshot)
        lines.append("")
        return lines

    def _deployed_contract(self, name: str, snapshot: ContractSnapshot) -> List[str]:
        entry = snapshot.entry
        link = explorer_link(self.chain_id, entry.address) or entry.address
        label = f'<a href="{link}">{split_camel_case(name)}</a>'
        if entry.proxy:
            impl_link = explorer_link(self.chain_id, entry.implementation) or entry.implementation
            label += f' (<a href="{impl_link}">Implementation</a>)'

        constructor = snapshot.input.constructor
        if not constructor:
            return [f"- {label}"]

        lines = [
            "- <details>",
            f"  <summary>{label}</summary>",
            "  <table>",
            "    <tr>",
            "        <th>Parameter</th>",
            "        <th>Value</th>",
            "    </tr>",
        ]
        for key, value in constructor.items():
            if is_transaction(value):
                cell = _link_html(self.chain_id, value, "tx")
            elif is_address(value):
                cell = _link_html(self.chain_id, value)
            else:
                cell = value
            lines += ["    <tr>", f"        <td>{key}</td>", f"        <td>{cell}</td>", "    </tr>"]
        lines += ["  </table>", "  </details>"]
        return lines


def render_markdown(
    ledger: Ledger, project_url: str, project_name: Optional[str] = None
) -> str:
    """
    Render a chain ledger as markdown.

    Args:
        ledger: Chain ledger; only `latest` and `history` are read
        project_url: Browsable project URL used for release and commit links
        project_name: Document title (defaults to the last segment of project_url)

    Returns:
        Markdown document
    """
    return MarkdownRenderer(ledger, project_url, project_name).render()


def save_markdown(
    ledger: Ledger,
    report_path: Path,
    project_url: Optional[str] = None,
    project_name: Optional[str] = None,
) -> Path:
    """
    Render a chain ledger and write it to report_path.

    project_url defaults to the git origin of the report's project.
    Creates parent directories if they don't exist.
    """
    report_path.parent.mkdir(parents=True, exist_ok=True)
    if project_url is None:
        project_url = get_project_url(report_path.parent)

    with open(report_path, "w", encoding="utf-8") as f:
        f.write(render_markdown(ledger, project_url, project_name))

    logger.info("Wrote report %s", report_path)
    return report_path
