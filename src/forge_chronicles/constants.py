"""Configuration constants for forge-chronicles library."""

# Only OpenZeppelin's TransparentUpgradeableProxy is tracked as a proxy
PROXY_CONTRACT_NAME = "TransparentUpgradeableProxy"

# EIP-1967 implementation slot: bytes32(uint256(keccak256("eip1967.proxy.implementation")) - 1)
IMPLEMENTATION_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"

# bytes4(keccak256("version()"))
VERSION_SELECTOR = "0x54fd4d50"

DEFAULT_SCRIPT_NAME = "Deploy.s.sol"

RPC_URL_ENV = "RPC_URL"

# Anvil / hardhat default chain, has no block explorer
LOCAL_CHAIN_ID = 31337

# Block explorer base URLs by chain id
CHAIN_EXPLORERS = {
    1: "https://etherscan.io",
    5: "https://goerli.etherscan.io",
    11155111: "https://sepolia.etherscan.io",
}

FALLBACK_EXPLORER = "https://blockscan.com"
