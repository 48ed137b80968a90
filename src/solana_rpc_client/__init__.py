"""Solana RPC client with TTL caching, linear-backoff retries, and log subscriptions."""

from solana_rpc_client.client import SolanaClient
from solana_rpc_client.core import (
    Absent,
    AccountInfo,
    Block,
    ClientConfig,
    Commitment,
    InvalidRangeError,
    LogNotification,
    RangeTooLargeError,
    RPCError,
    Subscription,
    TransactionRecord,
)
from solana_rpc_client.data import load_client_config

__all__ = [
    "Absent",
    "AccountInfo",
    "Block",
    "ClientConfig",
    "Commitment",
    "InvalidRangeError",
    "LogNotification",
    "RPCError",
    "RangeTooLargeError",
    "SolanaClient",
    "Subscription",
    "TransactionRecord",
    "load_client_config",
]
