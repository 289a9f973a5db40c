"""On-chain reads (version string, proxy implementation) for forge-chronicles library."""

import logging
from typing import Any, List, Optional

import eth_abi
import requests
from eth_abi.exceptions import DecodingError
from eth_utils import to_checksum_address

from .constants import IMPLEMENTATION_SLOT, VERSION_SELECTOR
from .exceptions import OracleUnavailableError

logger = logging.getLogger(__name__)


class ChainOracle:
    """
    Read-only JSON-RPC queries against the chain a run was broadcast to.

    Without an RPC URL every read degrades to unknown, except
    read_implementation() which refuses to guess.
    """

    def __init__(self, rpc_url: Optional[str] = None, timeout: int = 30):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._request_id = 0

    @property
    def available(self) -> bool:
        return self.rpc_url is not None

    def _request(self, method: str, params: List[Any]) -> Any:
        """
        Make a JSON-RPC call and return its result.

        Raises:
            ValueError: If the node returns an error
            RuntimeError: If a network error occurs
        """
        self._request_id += 1
        try:
            response = requests.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params,
                    "id": self._request_id,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RuntimeError(f"Network error during RPC call: {e}") from e

        if response.status_code != 200:
            raise RuntimeError(f"RPC request failed with status {response.status_code}")

        result = response.json()
        if "error" in result:
            raise ValueError(f"RPC error: {result['error']}")

        if result.get("result") is None:
            raise ValueError("RPC response missing result")

        return result["result"]

    def read_version(self, address: str) -> Optional[str]:
        """
        Read the `version()` string of a contract.

        Args:
            address: Contract (or proxy) address

        Returns:
            Version string, or None if unknown. Contracts that revert
            (no version() function) yield None silently; any other
            failure is logged.
        """
        if not self.available:
            return None

        try:
            data = self._request(
                "eth_call", [{"to": address, "data": VERSION_SELECTOR}, "latest"]
            )
        except ValueError as e:
            if "execution reverted" not in str(e).lower():
                logger.warning("Could not read version of %s: %s", address, e)
            return None
        except RuntimeError as e:
            logger.warning("Could not read version of %s: %s", address, e)
            return None

        # Calls to accounts without code succeed with empty return data
        if not data or data == "0x":
            return None

        try:
            (version,) = eth_abi.decode(["string"], bytes.fromhex(data[2:]))
        except (ValueError, DecodingError) as e:
            logger.warning("Could not decode version of %s: %s", address, e)
            return None

        return version

    def read_implementation(self, proxy_address: str) -> Optional[str]:
        """
        Read the EIP-1967 implementation slot of a proxy.

        Args:
            proxy_address: Proxy address

        Returns:
            Checksummed implementation address, or None if the read failed

        Raises:
            OracleUnavailableError: If no RPC URL is configured
        """
        if not self.available:
            raise OracleUnavailableError(
                f"No RPC URL provided, cannot verify upgrade of proxy {proxy_address}",
                address=proxy_address,
            )

        try:
            word = self._request(
                "eth_getStorageAt", [proxy_address, IMPLEMENTATION_SLOT, "latest"]
            )
            (implementation,) = eth_abi.decode(
                ["address"], bytes.fromhex(word[2:]).rjust(32, b"\x00")
            )
        except (ValueError, RuntimeError, DecodingError) as e:
            logger.warning("Could not read implementation of %s: %s", proxy_address, e)
            return None

        return to_checksum_address(implementation)
