"""Exceptions raised by the Solana RPC client."""

from typing import Any


class SolanaClientError(Exception):
    """Base class for errors raised by this package."""


class InvalidRangeError(SolanaClientError, ValueError):
    """Raised when a slot range ends before it starts."""

    def __init__(self, from_slot: int, to_slot: int) -> None:
        self.from_slot = from_slot
        self.to_slot = to_slot
        super().__init__(f"to_slot ({to_slot}) must be >= from_slot ({from_slot})")


class RangeTooLargeError(SolanaClientError, ValueError):
    """Raised when a slot range exceeds the maximum batch window."""

    def __init__(self, from_slot: int, to_slot: int, max_batch: int) -> None:
        self.from_slot = from_slot
        self.to_slot = to_slot
        self.max_batch = max_batch
        size = to_slot - from_slot + 1
        super().__init__(f"Range too large: {size} slots requested, max {max_batch} per call")


class RPCError(SolanaClientError):
    """
    JSON-RPC error object returned by the remote node.

    Parameters
    ----------
    code : int
        JSON-RPC error code
    message : str
        Error message from the node
    data : Any
        Optional error payload

    """

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC error {code}: {message}")
