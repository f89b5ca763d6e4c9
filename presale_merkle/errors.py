from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    PARSE_ERROR = "parse_error"
    ADDRESS_FORMAT_ERROR = "address_format_error"
    RANK_MISMATCH = "rank_mismatch"
    INVALID_TREE_SIZE = "invalid_tree_size"
    NOT_IN_TREE = "not_in_tree"


class WhitelistError(Exception):
    """Base class for every error raised while building a presale tree."""

    # Set by each concrete error.
    code: Optional[ErrorCode] = None


class ParseError(WhitelistError):
    """Raised when an input line or compact data entry cannot be read."""

    code = ErrorCode.PARSE_ERROR

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.line = line


class AddressFormatError(WhitelistError):
    """Raised when a token is not a valid address."""

    code = ErrorCode.ADDRESS_FORMAT_ERROR

    def __init__(self, source: str, line: int, token: str):
        super().__init__(
            f"Not an address ({source} line {line}): '{token}' (length {len(token)})"
        )
        self.source = source
        self.line = line
        self.token = token


class RankMismatchError(WhitelistError):
    """Raised when compact data and rank metadata disagree in length."""

    code = ErrorCode.RANK_MISMATCH


class InvalidTreeSizeError(WhitelistError):
    """Raised when a tree is built from fewer than two leaves."""

    code = ErrorCode.INVALID_TREE_SIZE


class NotInTreeError(WhitelistError):
    """Raised when a proof is requested for an address with no leaf."""

    code = ErrorCode.NOT_IN_TREE

    def __init__(self, address: str):
        super().__init__(f"Address '{address}' is not in the Merkle tree.")
        self.address = address
