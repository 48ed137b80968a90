"""Cluster endpoints and client configuration loading."""

from solana_rpc_client.data.loader import (
    RPC_URL_ENV_VAR,
    get_all_clusters,
    get_cluster_endpoint,
    load_client_config,
    load_clusters,
)

__all__ = [
    "RPC_URL_ENV_VAR",
    "get_all_clusters",
    "get_cluster_endpoint",
    "load_client_config",
    "load_clusters",
]
