"""Core functionality including models, errors, and subscriptions."""

from solana_rpc_client.core.errors import InvalidRangeError, RangeTooLargeError, RPCError, SolanaClientError
from solana_rpc_client.core.models import (
    MAX_BATCH,
    Absent,
    AccountInfo,
    Block,
    BlockRange,
    ClientConfig,
    Commitment,
    HealthStatus,
    LogNotification,
    TransactionRecord,
)
from solana_rpc_client.core.subscriptions import Subscription, SubscriptionManager

__all__ = [
    "MAX_BATCH",
    "Absent",
    "AccountInfo",
    "Block",
    "BlockRange",
    "ClientConfig",
    "Commitment",
    "HealthStatus",
    "InvalidRangeError",
    "LogNotification",
    "RPCError",
    "RangeTooLargeError",
    "SolanaClientError",
    "Subscription",
    "SubscriptionManager",
    "TransactionRecord",
]
