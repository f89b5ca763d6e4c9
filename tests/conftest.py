"""
Pytest configuration and fixtures for presale Merkle tests.
"""

from typing import List

import pytest
from eth_utils import keccak, to_checksum_address

from presale_merkle.merkle_tree import MerkleLeaf

# Hardhat default accounts
USER_1 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
USER_2 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
USER_3 = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
USER_4 = "0x90F79bf6EB2c4f870365E785982E1f101E93b906"

ONE_ETHER = 10**18


def make_addresses(n: int) -> List[str]:
    return [to_checksum_address("0x" + keccak(i.to_bytes(32, "big"))[-20:].hex()) for i in range(n)]


def make_leaves(n: int) -> List[MerkleLeaf]:
    return [
        MerkleLeaf(address, 1 + i % 4, (i % 3) * ONE_ETHER // 100)
        for i, address in enumerate(make_addresses(n))
    ]


def encode_packed_leaf(address: str, max_mints: int, voucher_amount: int) -> bytes:
    """abi.encodePacked(address, uint256, uint256), built by hand."""
    return bytes.fromhex(address[2:]) + max_mints.to_bytes(32, "big") + voucher_amount.to_bytes(32, "big")


def verify_sorted(leaf: bytes, proof: List[bytes], root: bytes) -> bool:
    """Reference verifier matching OpenZeppelin MerkleProof.verify."""
    computed = leaf
    for sibling in proof:
        if computed <= sibling:
            computed = keccak(computed + sibling)
        else:
            computed = keccak(sibling + computed)
    return computed == root


@pytest.fixture
def two_leaves():
    return [
        MerkleLeaf(USER_1, 1, 0),
        MerkleLeaf(USER_2, 3, ONE_ETHER),
    ]


@pytest.fixture
def three_leaves():
    return [
        MerkleLeaf(USER_1, 2, 0),
        MerkleLeaf(USER_2, 3, 0),
        MerkleLeaf(USER_3, 4, 88 * ONE_ETHER // 1000),
    ]


@pytest.fixture
def write_list(tmp_path):
    """Write lines to a file under tmp_path and return its path."""

    def _write(name: str, lines: List[str], trailing_newline: bool = True) -> str:
        path = tmp_path / name
        text = "\n".join(lines)
        if trailing_newline:
            text += "\n"
        path.write_text(text)
        return str(path)

    return _write
