from web3 import Web3

# --- CONFIGURATION ---

# abi.encodePacked(address account, uint256 maxMints, uint256 voucherAmount)
LEAF_TYPES = ["address", "uint256", "uint256"]
NODE_TYPES = ["bytes32", "bytes32"]

UINT256_MAX = 2**256 - 1

# Tron Base58Check payloads are 0x41 followed by the 20-byte EVM address.
TRON_ADDRESS_PREFIX = 0x41

# (source, maxMints, voucherAmount), worst rank first.
RANKS_FROM_WORST_TO_BEST = [
    ("data/peasants.csv", 2, 0),
    ("data/citizens.csv", 3, 0),
    ("data/governors.csv", 4, Web3.to_wei("0.088", "ether")),
]

# Compact whitelist written by resolution and read back to rebuild the tree.
COMPACT_DATA_PATH = "data/merkle.json"
