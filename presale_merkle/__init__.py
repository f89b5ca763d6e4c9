"""
Presale allowlist Merkle tooling.

Resolves ranked address lists into a deduplicated compact whitelist, encodes
it into (address, maxMints, voucherAmount) leaves and builds the sorted-pair
keccak tree whose root and proofs are checked by the sale contract.
"""

from presale_merkle.errors import (
    AddressFormatError,
    ErrorCode,
    InvalidTreeSizeError,
    NotInTreeError,
    ParseError,
    RankMismatchError,
    WhitelistError,
)
from presale_merkle.merkle_tree import MerkleLeaf, MerkleTree, hash_leaf, hash_pair
from presale_merkle.whitelist import (
    CompactWhitelist,
    RankInfo,
    construct_compact_data,
    leaves_from_compact,
    resolve_ranks,
    tree_from_compact,
)

__all__ = [
    "AddressFormatError",
    "CompactWhitelist",
    "ErrorCode",
    "InvalidTreeSizeError",
    "MerkleLeaf",
    "MerkleTree",
    "NotInTreeError",
    "ParseError",
    "RankInfo",
    "RankMismatchError",
    "WhitelistError",
    "construct_compact_data",
    "hash_leaf",
    "hash_pair",
    "leaves_from_compact",
    "resolve_ranks",
    "tree_from_compact",
]
