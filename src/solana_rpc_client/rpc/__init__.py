"""RPC layer with transport, retry logic, caching, and log subscriptions."""

from solana_rpc_client.rpc.cache import CacheEntry, RPCCache, make_cache_key
from solana_rpc_client.rpc.logs import LogStream
from solana_rpc_client.rpc.retry import RetryConfig, RetryExecutor
from solana_rpc_client.rpc.transport import HttpRPCTransport, RPCTransport, derive_ws_url

__all__ = [
    "CacheEntry",
    "HttpRPCTransport",
    "LogStream",
    "RPCCache",
    "RPCTransport",
    "RetryConfig",
    "RetryExecutor",
    "derive_ws_url",
    "make_cache_key",
]
