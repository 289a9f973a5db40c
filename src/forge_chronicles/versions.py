"""Version ordering utilities for forge-chronicles library."""

import re
from typing import Iterable, Optional, Tuple


def version_key(version: str) -> Tuple[int, ...]:
    """
    Sort key for version strings.

    Numeric components compare as numbers, so "1.10.0" sorts after "1.9.0".
    A leading "v" and any non-numeric suffix are ignored.

    Args:
        version: Version string (e.g., "1.2.0" or "v1.2.0")

    Returns:
        Tuple of the numeric components
    """
    return tuple(int(part) for part in re.findall(r"\d+", version))


def highest_version(versions: Iterable[Optional[str]]) -> Optional[str]:
    """
    Pick the highest version, skipping unknown (None or empty) ones.

    Returns:
        Highest version string, or None if no version is known
    """
    known = [v for v in versions if v]
    if not known:
        return None
    return max(known, key=version_key)
