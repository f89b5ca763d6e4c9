import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Union

from presale_merkle.addresses import extract_token, normalize
from presale_merkle.constants import COMPACT_DATA_PATH, UINT256_MAX
from presale_merkle.errors import AddressFormatError, ParseError, RankMismatchError
from presale_merkle.merkle_tree import MerkleLeaf, MerkleTree

logger = logging.getLogger(__name__)

# --- TYPES ---

@dataclass(frozen=True)
class RankInfo:
    source: str           # path to a one-address-per-line list
    max_mints: int        # uint256, at least 1
    voucher_amount: int   # uint256, wei

    def __post_init__(self):
        if not (1 <= self.max_mints <= UINT256_MAX):
            raise ValueError(f"maxMints must be between 1 and uint256 max, got {self.max_mints}")
        if not (0 <= self.voucher_amount <= UINT256_MAX):
            raise ValueError("voucherAmount exceeds uint256")


RankLike = Union[RankInfo, Sequence]


def to_rank(rank: RankLike) -> RankInfo:
    if isinstance(rank, RankInfo):
        return rank
    source, max_mints, voucher_amount = rank
    return RankInfo(source, int(max_mints), int(voucher_amount))


class CompactWhitelist:
    """
    Deduplicated addresses grouped by rank, worst rank first.

    Each address appears in exactly one bucket. Iteration order within a
    bucket is kept so that leaf encoding is deterministic, but equality only
    compares bucket membership.

    Addresses are checksummed on construction. An invalid address raises
    AddressFormatError; an address in two buckets, or a bucket that is not a
    list of strings, raises ParseError. A ``None`` bucket is empty.
    """

    def __init__(self, buckets: Iterable[Optional[Iterable[str]]], source: str = "compact data"):
        seen: Dict[str, int] = {}
        self.buckets: List[List[str]] = []
        for rank_id, bucket in enumerate(buckets):
            # Empty ranks may have been written as null.
            if bucket is None:
                bucket = []
            if isinstance(bucket, (str, bytes)) or not hasattr(bucket, "__iter__"):
                raise ParseError(f"Rank {rank_id} in {source} is not a list", source=source)

            addresses: List[str] = []
            for i, token in enumerate(bucket):
                if not isinstance(token, str):
                    raise ParseError(f"Rank {rank_id} entry {i} in {source} is not a string", source=source)
                try:
                    address = normalize(token)
                except ValueError as e:
                    raise AddressFormatError(f"{source} rank {rank_id}", i + 1, token) from e

                key = address.lower()
                if key in seen:
                    raise ParseError(
                        f"Address {address} appears in ranks {seen[key]} and {rank_id} of {source}",
                        source=source,
                    )
                seen[key] = rank_id
                addresses.append(address)
            self.buckets.append(addresses)

    def __len__(self) -> int:
        return len(self.buckets)

    def __iter__(self):
        return iter(self.buckets)

    def __getitem__(self, rank_id: int) -> List[str]:
        return self.buckets[rank_id]

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, CompactWhitelist):
            return NotImplemented
        return self.as_sets() == other.as_sets()

    def __repr__(self) -> str:
        return f"CompactWhitelist({self.counts()})"

    def as_sets(self) -> List[Set[str]]:
        return [set(bucket) for bucket in self.buckets]

    def counts(self) -> List[int]:
        return [len(bucket) for bucket in self.buckets]

    def address_count(self) -> int:
        return sum(self.counts())

    def rank_of(self, address: str) -> Optional[int]:
        wanted = address.lower()
        for rank_id, bucket in enumerate(self.buckets):
            if any(a.lower() == wanted for a in bucket):
                return rank_id
        return None

# --- PARSING ---

def parse_addresses(lines: Sequence[str], source: str, accept_tron: bool = False) -> List[str]:
    """
    Read one address from the start of each line.

    A single trailing empty line is ignored; any other line without a token
    is a ParseError. Returns checksummed addresses in input order.
    """
    lines = list(lines)
    if lines and len(lines[-1].strip()) == 0:
        lines.pop()

    addresses: List[str] = []
    for i, line in enumerate(lines, start=1):
        token = extract_token(line)
        if token is None:
            raise ParseError(f"Empty line ({source} line {i})", source=source, line=i)
        try:
            addresses.append(normalize(token, accept_tron=accept_tron))
        except ValueError as e:
            raise AddressFormatError(source, i, token) from e
    return addresses


def read_addresses(path: str, accept_tron: bool = False) -> List[str]:
    with open(path) as f:
        content = f.read()
    return parse_addresses(content.split("\n"), path, accept_tron=accept_tron)

# --- RESOLUTION ---

def resolve_ranks(ranks_from_worst_to_best: Sequence[RankLike], accept_tron: bool = False) -> CompactWhitelist:
    ranks = [to_rank(r) for r in ranks_from_worst_to_best]
    normalized = [read_addresses(rank.source, accept_tron=accept_tron) for rank in ranks]

    # Later (better) ranks overwrite earlier ones.
    address_to_best_rank: Dict[str, int] = {}
    for rank_id, group in enumerate(normalized):
        for address in group:
            address_to_best_rank[address] = rank_id

    grouped: List[List[str]] = [[] for _ in ranks]
    for address, rank_id in address_to_best_rank.items():
        grouped[rank_id].append(address)

    whitelist = CompactWhitelist(grouped)
    log_rank_counts(ranks, normalized, whitelist)
    return whitelist


def log_rank_counts(ranks: Sequence[RankInfo], normalized: Sequence[List[str]], whitelist: CompactWhitelist) -> None:
    logger.info("Original lists:")
    for rank, group in zip(ranks, normalized):
        logger.info(" - %s: %d", os.path.basename(rank.source), len(group))
    logger.info("After matching duplicates to their highest rank:")
    for rank, count in zip(ranks, whitelist.counts()):
        logger.info(" - %s: %d", os.path.basename(rank.source), count)


def construct_compact_data(ranks_from_worst_to_best: Sequence[RankLike], out_path: str = COMPACT_DATA_PATH,
                           accept_tron: bool = False) -> CompactWhitelist:
    whitelist = resolve_ranks(ranks_from_worst_to_best, accept_tron=accept_tron)
    write(whitelist, out_path)
    return whitelist

# --- COMPACT DATA CODEC ---

def encode(whitelist: CompactWhitelist) -> List[List[str]]:
    return [list(bucket) for bucket in whitelist.buckets]


def decode(data: Any, source: str = "compact data") -> CompactWhitelist:
    if not isinstance(data, (list, tuple)):
        raise ParseError(f"Expected a list of rank buckets in {source}", source=source)
    for rank_id, bucket in enumerate(data):
        if bucket is not None and not isinstance(bucket, (list, tuple)):
            raise ParseError(f"Rank {rank_id} in {source} is not a list", source=source)
    return CompactWhitelist(data, source=source)


def dumps(whitelist: CompactWhitelist) -> str:
    return json.dumps(encode(whitelist))


def loads(text: str, source: str = "compact data") -> CompactWhitelist:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in {source}: {e}", source=source, line=e.lineno) from e
    return decode(data, source=source)


def write(whitelist: CompactWhitelist, path: str = COMPACT_DATA_PATH) -> None:
    with open(path, "w") as f:
        json.dump(encode(whitelist), f, indent=2)
    logger.debug("Saved compact whitelist (%s) to %s", whitelist.counts(), path)


def read(path: str = COMPACT_DATA_PATH) -> CompactWhitelist:
    with open(path) as f:
        text = f.read()
    whitelist = loads(text, source=path)
    logger.debug("Loaded compact whitelist (%s) from %s", whitelist.counts(), path)
    return whitelist

# --- LEAF ENCODING ---

def leaves_from_compact(whitelist: Union[CompactWhitelist, Sequence[Sequence[str]]],
                        ranks_from_worst_to_best: Sequence[RankLike]) -> List[MerkleLeaf]:
    if not isinstance(whitelist, CompactWhitelist):
        whitelist = decode(whitelist)
    ranks = [to_rank(r) for r in ranks_from_worst_to_best]
    if len(whitelist) != len(ranks):
        raise RankMismatchError(
            f"Compact data has {len(whitelist)} ranks but {len(ranks)} rank infos were given"
        )

    leaves: List[MerkleLeaf] = []
    for bucket, rank in zip(whitelist.buckets, ranks):
        for address in bucket:
            leaves.append(MerkleLeaf(address, rank.max_mints, rank.voucher_amount))
    return leaves


def tree_from_compact(whitelist: Union[CompactWhitelist, Sequence[Sequence[str]]],
                      ranks_from_worst_to_best: Sequence[RankLike], eager: bool = False) -> MerkleTree:
    return MerkleTree(leaves_from_compact(whitelist, ranks_from_worst_to_best), eager=eager)
