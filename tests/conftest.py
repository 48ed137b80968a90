"""Pytest configuration and fakes for solana-rpc-client tests."""

import pytest

from solana_rpc_client import SolanaClient
from solana_rpc_client.core.models import AccountInfo, Block, ClientConfig, TransactionRecord
from solana_rpc_client.rpc.cache import RPCCache
from solana_rpc_client.rpc.retry import RetryConfig, RetryExecutor


class FakeTransport:
    """In-memory transport that records calls and can be scripted to fail."""

    def __init__(self) -> None:
        self.accounts: dict[str, AccountInfo] = {}
        self.balances: dict[str, int] = {}
        self.blocks: dict[int, Block] = {}
        self.transactions: dict[str, TransactionRecord] = {}
        self.slot: int | None = 250_000_000
        self.calls: list[tuple] = []
        self.failures: dict[str, list[Exception]] = {}
        self.listeners: dict[int, tuple] = {}
        self.unsubscribe_error: Exception | None = None
        self.closed = False
        self._next_handle = 1

    def fail(self, method: str, *errors: Exception) -> None:
        """Queue exceptions raised by the next calls to ``method``."""
        self.failures.setdefault(method, []).extend(errors)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def add_block(self, slot: int) -> Block:
        block = Block(blockhash=f"hash-{slot}", previous_blockhash=f"hash-{slot - 1}", parent_slot=slot - 1)
        self.blocks[slot] = block
        return block

    def emit(self, handle: int, notification) -> None:
        """Deliver a notification the way the transport's dispatch loop would."""
        _topic, callback, _commitment = self.listeners[handle]
        callback(notification)

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        queued = self.failures.get(method)
        if queued:
            raise queued.pop(0)

    async def get_account_info(self, address, commitment):
        self._record("get_account_info", address, commitment)
        return self.accounts.get(address)

    async def get_balance(self, address, commitment):
        self._record("get_balance", address, commitment)
        return self.balances.get(address, 0)

    async def get_block(self, slot, commitment, max_supported_transaction_version):
        self._record("get_block", slot, commitment, max_supported_transaction_version)
        return self.blocks.get(slot)

    async def get_transaction(self, signature, commitment, max_supported_transaction_version):
        self._record("get_transaction", signature, commitment, max_supported_transaction_version)
        return self.transactions.get(signature)

    async def get_slot(self, commitment):
        self._record("get_slot", commitment)
        return self.slot

    async def subscribe_logs(self, topic, callback, commitment):
        self._record("subscribe_logs", topic, commitment)
        handle = self._next_handle
        self._next_handle += 1
        self.listeners[handle] = (topic, callback, commitment)
        return handle

    async def unsubscribe_logs(self, handle):
        self._record("unsubscribe_logs", handle)
        if self.unsubscribe_error is not None:
            raise self.unsubscribe_error
        del self.listeners[handle]

    async def close(self):
        self.closed = True


class HealthCheckTransport(FakeTransport):
    """Fake transport that also exposes a direct health check."""

    def __init__(self, status: str = "ok") -> None:
        super().__init__()
        self.status = status

    async def get_health(self):
        self._record("get_health")
        return self.status


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def reported_errors() -> list:
    return []


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(rpc_url="http://127.0.0.1:8899")


@pytest.fixture
def make_client(config, clock, sleep, reported_errors):
    """Build a client around a transport with a fake clock and sleep."""

    def _make(transport, client_config: ClientConfig | None = None) -> SolanaClient:
        effective = client_config or config
        return SolanaClient(
            effective,
            transport,
            cache=RPCCache(ttl=effective.cache_ttl, capacity=effective.cache_capacity, clock=clock),
            retry_executor=RetryExecutor(
                RetryConfig(max_attempts=effective.retry_attempts, base_delay=effective.retry_base_delay),
                sleep=sleep,
            ),
            on_error=lambda context, exc: reported_errors.append((context, exc)),
        )

    return _make


@pytest.fixture
def health_transport() -> HealthCheckTransport:
    return HealthCheckTransport(status="behind")


@pytest.fixture
def client(make_client, transport) -> SolanaClient:
    return make_client(transport)
