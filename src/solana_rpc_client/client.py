"""Caching, retrying Solana RPC client."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from solana_rpc_client.core.models import (
    MAX_BATCH,
    Absent,
    AccountInfo,
    Block,
    BlockRange,
    ClientConfig,
    HealthStatus,
    TransactionRecord,
)
from solana_rpc_client.core.subscriptions import ErrorReporter, LogCallback, Subscription, SubscriptionManager
from solana_rpc_client.rpc.cache import RPCCache, make_cache_key
from solana_rpc_client.rpc.retry import RetryConfig, RetryExecutor
from solana_rpc_client.rpc.transport import HttpRPCTransport, RPCTransport

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SolanaClient:
    """
    Solana RPC client with a shared TTL cache, retries, and log subscriptions.

    Every read checks the cache first. On a miss the transport call runs
    through the retry executor and its result, including "no data"
    (``Absent``), is cached for ``config.cache_ttl`` seconds.

    Parameters
    ----------
    config : ClientConfig
        Client options
    transport : RPCTransport | None
        Underlying service. An ``HttpRPCTransport`` for ``config.rpc_url`` if None.
    cache : RPCCache | None
        Result cache. Built from ``config`` if None.
    retry_executor : RetryExecutor | None
        Retry executor. Built from ``config`` if None.
    on_error : ErrorReporter | None
        Receives subscription callback and disposal failures. Logs them if None.

    """

    def __init__(
        self,
        config: ClientConfig,
        transport: RPCTransport | None = None,
        *,
        cache: RPCCache | None = None,
        retry_executor: RetryExecutor | None = None,
        on_error: ErrorReporter | None = None,
    ) -> None:
        self.config = config
        if transport is None:
            transport = HttpRPCTransport(config.rpc_url, ws_url=config.ws_url, timeout=config.request_timeout)
        if cache is None:
            cache = RPCCache(ttl=config.cache_ttl, capacity=config.cache_capacity)
        if retry_executor is None:
            retry_executor = RetryExecutor(
                RetryConfig(max_attempts=config.retry_attempts, base_delay=config.retry_base_delay)
            )
        self.transport = transport
        self.cache = cache
        self.retry = retry_executor
        self.subscriptions = SubscriptionManager(self.transport, config.commitment, on_error)

    @classmethod
    def from_url(cls, rpc_url: str, **options: Any) -> "SolanaClient":
        """
        Build a client for ``rpc_url`` with ``ClientConfig`` options.

        Examples
        --------
        >>> client = SolanaClient.from_url("https://api.devnet.solana.com", cache_ttl=10)

        """
        return cls(ClientConfig(rpc_url=rpc_url, **options))

    @property
    def commitment(self) -> str:
        return self.config.commitment

    async def _cached(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return cached

        logger.debug("Cache miss: %s", key)
        result = await self.retry.execute(fetch, description=key)
        self.cache.set(key, result)
        return result

    async def get_account_info(self, address: str) -> AccountInfo | Absent:
        """
        Fetch account state.

        Parameters
        ----------
        address : str
            Account address (base58)

        Returns
        -------
        AccountInfo | Absent
            Account state, or ``Absent`` if the account does not exist

        """

        async def fetch() -> AccountInfo | Absent:
            info = await self.transport.get_account_info(address, self.commitment)
            return info if info is not None else Absent(operation="accountInfo", key=address)

        return await self._cached(make_cache_key("accountInfo", address), fetch)

    async def get_balance(self, address: str) -> int:
        """
        Fetch an account balance.

        Parameters
        ----------
        address : str
            Account address (base58)

        Returns
        -------
        int
            Balance in lamports

        """

        async def fetch() -> int:
            return await self.transport.get_balance(address, self.commitment)

        return await self._cached(make_cache_key("balance", address), fetch)

    async def get_block(self, slot: int, max_supported_transaction_version: int | None = 0) -> Block | Absent:
        """
        Fetch the block produced at ``slot``.

        The cache key is the slot alone: calls for the same slot with a
        different ``max_supported_transaction_version`` share one entry.

        Parameters
        ----------
        slot : int
            Slot number
        max_supported_transaction_version : int | None
            Highest transaction version to include, passed to the node unchanged

        Returns
        -------
        Block | Absent
            The block, or ``Absent`` if the node has none for this slot

        """

        async def fetch() -> Block | Absent:
            block = await self.transport.get_block(slot, self.commitment, max_supported_transaction_version)
            return block if block is not None else Absent(operation="block", key=str(slot))

        return await self._cached(make_cache_key("block", str(slot)), fetch)

    async def get_blocks(
        self,
        from_slot: int,
        to_slot: int,
        max_supported_transaction_version: int | None = 0,
    ) -> list[Block | None]:
        """
        Fetch every block in an inclusive slot range, one slot at a time.

        Parameters
        ----------
        from_slot : int
            First slot
        to_slot : int
            Last slot (inclusive)
        max_supported_transaction_version : int | None
            Forwarded to each ``get_block`` call

        Returns
        -------
        list[Block | None]
            One item per slot in increasing order, None where no block exists

        Raises
        ------
        InvalidRangeError
            If ``to_slot < from_slot``
        RangeTooLargeError
            If the range covers more than 500 slots

        """
        slots = BlockRange(from_slot, to_slot, max_batch=MAX_BATCH)

        blocks: list[Block | None] = []
        for slot in slots:
            block = await self.get_block(slot, max_supported_transaction_version)
            blocks.append(None if isinstance(block, Absent) else block)
        return blocks

    async def get_health(self) -> str:
        """
        Report node health.

        Uses the transport's own health check when it has one; otherwise the
        node is ``"ok"`` if it reports a current slot and ``"unknown"`` if not.

        Returns
        -------
        str
            Health status

        """

        async def probe() -> str:
            health_check = getattr(self.transport, "get_health", None)
            if callable(health_check):
                return await health_check()
            slot = await self.transport.get_slot(self.commitment)
            return HealthStatus.OK if slot is not None else HealthStatus.UNKNOWN

        return await self._cached(make_cache_key("health", "v1"), probe)

    async def get_transaction(self, signature: str) -> TransactionRecord | Absent:
        """
        Fetch a confirmed transaction.

        Parameters
        ----------
        signature : str
            Transaction signature (base58)

        Returns
        -------
        TransactionRecord | Absent
            The transaction, or ``Absent`` if the node does not know it

        """

        async def fetch() -> TransactionRecord | Absent:
            tx = await self.transport.get_transaction(signature, self.commitment, 0)
            return tx if tx is not None else Absent(operation="tx", key=signature)

        return await self._cached(make_cache_key("tx", signature), fetch)

    async def subscribe_logs(self, topic: str, callback: LogCallback) -> Subscription:
        """
        Subscribe to logs of transactions mentioning ``topic``.

        Exceptions raised by ``callback`` go to the error reporter and never
        reach the transport. Await the returned subscription's ``dispose()``
        to unregister.

        Parameters
        ----------
        topic : str
            Program or account address
        callback : LogCallback
            Called once per log notification

        Returns
        -------
        Subscription
            Disposer for the registration

        """
        return await self.subscriptions.subscribe(topic, callback)

    async def close(self) -> None:
        """Dispose live subscriptions and close the transport."""
        await self.subscriptions.dispose_all()
        await self.transport.close()

    async def __aenter__(self) -> "SolanaClient":
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        await self.close()
