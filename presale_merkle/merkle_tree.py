import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from web3 import Web3

from presale_merkle.addresses import normalize
from presale_merkle.constants import LEAF_TYPES, NODE_TYPES, UINT256_MAX
from presale_merkle.errors import InvalidTreeSizeError, NotInTreeError

logger = logging.getLogger(__name__)

# --- TYPES ---

@dataclass(frozen=True)
class MerkleLeaf:
    address: str          # address, checksummed
    max_mints: int        # uint256
    voucher_amount: int   # uint256, wei

    def __post_init__(self):
        object.__setattr__(self, "address", normalize(self.address))
        ensure_uint_bounds(self.max_mints, self.voucher_amount)


LeafLike = Union[MerkleLeaf, Tuple[str, int, int]]

# --- HELPERS ---

def ensure_uint_bounds(max_mints: int, voucher_amount: int) -> None:
    if not (0 <= max_mints <= UINT256_MAX):
        raise ValueError("maxMints exceeds uint256")
    if not (0 <= voucher_amount <= UINT256_MAX):
        raise ValueError("voucherAmount exceeds uint256")


def to_leaf(leaf: LeafLike) -> MerkleLeaf:
    if isinstance(leaf, MerkleLeaf):
        return leaf
    address, max_mints, voucher_amount = leaf
    return MerkleLeaf(address, int(max_mints), int(voucher_amount))


def to_hex(value: bytes) -> str:
    return "0x" + value.hex()

# --- HASHING (matches the presale contract's leaf and MerkleProof.verify) ---

def hash_leaf(leaf: MerkleLeaf) -> bytes:
    """
    keccak256(abi.encodePacked(
        account(address), maxMints(uint256), voucherAmount(uint256)
    ))
    """
    return bytes(Web3.solidity_keccak(
        LEAF_TYPES,
        [leaf.address, leaf.max_mints, leaf.voucher_amount]
    ))


def hash_pair(a: bytes, b: bytes) -> bytes:
    # Sorted-pair hashing, ascending byte order, for OZ-compatible proofs.
    if a > b:
        a, b = b, a
    return bytes(Web3.solidity_keccak(NODE_TYPES, [a, b]))

# --- MERKLE LOGIC ---

class MerkleTree:
    """
    Binary keccak tree over presale leaves.

    Rows are numbered from the root (row 0) down to the leaves
    (row ``height - 1``). Each row holds ``ceil(width / 2)`` nodes of the row
    below it. A node whose left child is the last node of its row has no
    right child and takes the left child's hash unchanged; proofs skip that
    level.

    Node hashes are memoized by ``(row, column)``. The memo is filled lazily
    unless ``eager`` is set or :meth:`precompute` is called, after which the
    tree can be shared between threads.
    """

    def __init__(self, leaves: Iterable[LeafLike], eager: bool = False):
        self.leaves: Tuple[MerkleLeaf, ...] = tuple(to_leaf(leaf) for leaf in leaves)
        n = len(self.leaves)
        if n < 2:
            raise InvalidTreeSizeError(f"Expected at least two leaves, got {n}")

        # e.g. a tree with 8 leaves has a height of 4; the height is at least 2.
        self.height: int = (n - 1).bit_length() + 1

        widths = [0] * self.height
        widths[self.height - 1] = n
        for row in range(self.height - 2, -1, -1):
            widths[row] = (widths[row + 1] + 1) // 2
        self.row_widths: Tuple[int, ...] = tuple(widths)

        self._memo: Dict[Tuple[int, int], bytes] = {}
        self._columns: Dict[str, int] = {}
        for column, leaf in enumerate(self.leaves):
            self._columns.setdefault(leaf.address.lower(), column)

        logger.debug("Merkle tree: %d leaves, height %d, rows %s", n, self.height, self.row_widths)

        if eager:
            self.precompute()

    def __len__(self) -> int:
        return len(self.leaves)

    def __contains__(self, address: str) -> bool:
        try:
            return self._column_of(address) is not None
        except ValueError:
            return False

    def get_root(self) -> bytes:
        return self.get_node_hash(0, 0)

    def get_root_hex(self) -> str:
        return to_hex(self.get_root())

    def get_proof(self, address: str) -> List[bytes]:
        try:
            column = self._column_of(address)
        except ValueError as e:
            raise NotInTreeError(address) from e
        if column is None:
            raise NotInTreeError(address)

        proof: List[bytes] = []
        row = self.height - 1
        while row > 0:
            if column % 2 == 0:
                # An unpaired left node has no sibling at this level.
                if column != self.row_widths[row] - 1:
                    proof.append(self.get_node_hash(row, column + 1))
            else:
                proof.append(self.get_node_hash(row, column - 1))
            column >>= 1
            row -= 1
        return proof

    def _column_of(self, address: str) -> Optional[int]:
        return self._columns.get(normalize(address).lower())

    def get_proof_hex(self, address: str) -> List[str]:
        return [to_hex(p) for p in self.get_proof(address)]

    def get_node_hash(self, row: int, column: int) -> bytes:
        if not (0 <= row < self.height and 0 <= column < self.row_widths[row]):
            raise IndexError(f"No node at row {row}, column {column}")
        key = (row, column)
        node = self._memo.get(key)
        if node is None:
            node = self._get_node_hash_inner(row, column)
            self._memo[key] = node
        return node

    def precompute(self) -> None:
        """Fill every memo slot, leaves first."""
        for row in range(self.height - 1, -1, -1):
            for column in range(self.row_widths[row]):
                self.get_node_hash(row, column)

    def _get_node_hash_inner(self, row: int, column: int) -> bytes:
        if row == self.height - 1:
            return hash_leaf(self.leaves[column])

        child_row = row + 1
        left_column = column << 1
        left = self.get_node_hash(child_row, left_column)
        if left_column == self.row_widths[child_row] - 1:
            # Promote unpaired left child
            return left

        right = self.get_node_hash(child_row, left_column + 1)
        return hash_pair(left, right)
