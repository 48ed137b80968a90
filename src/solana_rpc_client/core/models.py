"""Data models for RPC results, client configuration, and slot ranges."""

from collections.abc import Iterator
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from solana_rpc_client.core.errors import InvalidRangeError, RangeTooLargeError

MAX_BATCH = 500


class Commitment(StrEnum):
    """Confidence level requested from the node."""

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


class HealthStatus(StrEnum):
    """Health values derived when the node has no direct health check."""

    OK = "ok"
    UNKNOWN = "unknown"


class RPCModel(BaseModel):
    """Base for models parsed from camelCase JSON-RPC payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class AccountInfo(RPCModel):
    """
    Account state.

    Attributes
    ----------
    lamports : int
        Account balance in lamports
    owner : str
        Owning program address
    executable : bool
        Whether the account holds a program
    rent_epoch : int | None
        Epoch at which rent is next due
    data : Any
        Account data as returned by the node (``[payload, encoding]``)
    space : int | None
        Data size in bytes

    """

    lamports: int
    owner: str
    executable: bool = False
    rent_epoch: int | None = None
    data: Any = None
    space: int | None = None


class Block(RPCModel):
    """
    Confirmed block.

    Attributes
    ----------
    blockhash : str
        Block hash
    previous_blockhash : str
        Parent block hash
    parent_slot : int
        Parent slot number
    block_time : int | None
        Estimated production time as a Unix timestamp
    block_height : int | None
        Number of blocks beneath this block
    transactions : list[dict]
        Transactions with their metadata

    """

    blockhash: str
    previous_blockhash: str
    parent_slot: int
    block_time: int | None = None
    block_height: int | None = None
    transactions: list[dict] = Field(default_factory=list)
    rewards: list[dict] | None = None


class TransactionRecord(RPCModel):
    """
    Confirmed transaction.

    Attributes
    ----------
    slot : int
        Slot the transaction was processed in
    transaction : Any
        Transaction body as returned by the node
    meta : dict | None
        Status metadata
    block_time : int | None
        Estimated production time
    version : int | str | None
        Transaction version (``"legacy"`` or a number)

    """

    slot: int
    transaction: Any
    meta: dict | None = None
    block_time: int | None = None
    version: int | str | None = None


class LogNotification(RPCModel):
    """
    Log notification delivered to a log subscription.

    Attributes
    ----------
    slot : int
        Slot the logs were produced in
    signature : str
        Transaction signature
    err : Any
        Transaction error, None on success
    logs : list[str]
        Log messages emitted by the transaction

    """

    slot: int
    signature: str
    err: Any = None
    logs: list[str] = Field(default_factory=list)


class Absent(BaseModel):
    """
    Marker for a lookup the node answered with "no data".

    It is cached like any other result, so a known-missing account, block, or
    transaction is not queried again until the entry expires.
    """

    model_config = ConfigDict(frozen=True)

    operation: str
    key: str


class ClientConfig(BaseModel):
    """
    Construction options for ``SolanaClient``.

    Attributes
    ----------
    rpc_url : str
        HTTP JSON-RPC endpoint
    ws_url : str | None
        Websocket endpoint for subscriptions. Derived from ``rpc_url`` if None.
    commitment : Commitment
        Confidence level for reads and subscriptions
    cache_ttl : float
        Cache time-to-live in seconds
    cache_capacity : int
        Maximum number of cached results
    retry_attempts : int
        Total attempts per RPC call
    retry_base_delay : float
        Backoff unit in seconds (attempt ``i`` waits ``i * retry_base_delay``)
    request_timeout : float
        HTTP request timeout in seconds

    """

    rpc_url: str
    ws_url: str | None = None
    commitment: Commitment = Commitment.CONFIRMED
    cache_ttl: float = Field(default=30.0, gt=0)
    cache_capacity: int = Field(default=5000, gt=0)
    retry_attempts: int = Field(default=4, ge=1)
    retry_base_delay: float = Field(default=0.2, ge=0)
    request_timeout: float = Field(default=30.0, gt=0)


class BlockRange:
    """
    Inclusive slot window for batch block fetches.

    Parameters
    ----------
    from_slot : int
        First slot
    to_slot : int
        Last slot (inclusive)
    max_batch : int
        Largest allowed number of slots

    Raises
    ------
    InvalidRangeError
        If ``to_slot < from_slot``
    RangeTooLargeError
        If the window holds more than ``max_batch`` slots

    """

    def __init__(self, from_slot: int, to_slot: int, max_batch: int = MAX_BATCH) -> None:
        if to_slot < from_slot:
            raise InvalidRangeError(from_slot, to_slot)
        if to_slot - from_slot + 1 > max_batch:
            raise RangeTooLargeError(from_slot, to_slot, max_batch)
        self.from_slot = from_slot
        self.to_slot = to_slot

    def __len__(self) -> int:
        return self.to_slot - self.from_slot + 1

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.from_slot, self.to_slot + 1))

    def __repr__(self) -> str:
        return f"BlockRange({self.from_slot}, {self.to_slot})"
