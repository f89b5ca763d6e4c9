import re
from typing import Optional

import base58
from eth_utils import is_checksum_address, is_hex_address, to_checksum_address

from presale_merkle.constants import TRON_ADDRESS_PREFIX

# An address is read from the first word run on each line.
TOKEN_PATTERN = re.compile(r"\w+")


def extract_token(line: str) -> Optional[str]:
    match = TOKEN_PATTERN.search(line)
    return match.group(0) if match else None


def tron_to_evm_address(tron_addr: str) -> str:
    """Return the checksummed presale address wrapped by a Base58Check Tron address."""
    decoded = base58.b58decode_check(tron_addr)
    if len(decoded) != 21 or decoded[0] != TRON_ADDRESS_PREFIX:
        raise ValueError(f"Invalid Tron address: {tron_addr}")
    return to_checksum_address("0x" + decoded[1:].hex())


def is_tron_address(token: str) -> bool:
    return len(token) == 34 and token.startswith("T")


def is_mixed_case(addr: str) -> bool:
    body = addr[2:]
    return not (body.islower() or body.isupper())


def normalize(addr: str, accept_tron: bool = False) -> str:
    """
    Return the EIP-55 checksummed form of ``addr``.

    Hex addresses may omit the 0x prefix. Mixed-case input must carry a valid
    checksum; all-lower and all-upper input is accepted as is. With
    ``accept_tron`` set, Base58Check Tron addresses are converted to the EVM
    address they wrap.
    """
    addr = addr.strip()
    if accept_tron and is_tron_address(addr):
        return tron_to_evm_address(addr)
    if not addr.startswith("0x"):
        addr = "0x" + addr
    if not is_hex_address(addr):
        raise ValueError(f"Invalid address: {addr}")
    if is_mixed_case(addr) and not is_checksum_address(addr):
        raise ValueError(f"Bad address checksum: {addr}")
    return to_checksum_address(addr)
