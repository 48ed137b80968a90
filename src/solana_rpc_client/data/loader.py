"""Cluster endpoint and client configuration loader."""

import os
from pathlib import Path
from typing import Any

import yaml

from solana_rpc_client.core.models import ClientConfig

RPC_URL_ENV_VAR = "SOLANA_RPC_URL"


def load_clusters() -> dict[str, Any]:
    """
    Load packaged cluster endpoints from clusters.yaml.

    Returns
    -------
    dict[str, Any]
        Cluster configuration including the default cluster name

    """
    path = Path(__file__).parent / "clusters.yaml"
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


def get_cluster_endpoint(cluster: str) -> dict[str, str]:
    """
    Get the endpoints of a named cluster.

    Parameters
    ----------
    cluster : str
        Cluster name (e.g., 'mainnet-beta', 'devnet')

    Returns
    -------
    dict[str, str]
        Mapping with ``rpc_url`` and ``ws_url``

    Raises
    ------
    KeyError
        If cluster is not found in configuration

    """
    return load_clusters()["clusters"][cluster]


def get_all_clusters() -> list[str]:
    """
    Get list of all known cluster names.

    Returns
    -------
    list[str]
        List of cluster names

    """
    return list(load_clusters()["clusters"].keys())


def load_client_config(path: str | Path | None = None, **overrides: Any) -> ClientConfig:
    """
    Build a ``ClientConfig`` from a YAML file, the environment, and overrides.

    The YAML file holds ``ClientConfig`` fields and may name a packaged
    ``cluster`` instead of spelling out ``rpc_url``/``ws_url``. Without a file
    the packaged default cluster is used. ``SOLANA_RPC_URL`` replaces the
    resulting ``rpc_url``; keyword overrides win over everything.

    Parameters
    ----------
    path : str | Path | None
        YAML configuration file
    **overrides : Any
        ``ClientConfig`` field values

    Returns
    -------
    ClientConfig
        Validated client configuration

    """
    settings: dict[str, Any] = {}
    if path is not None:
        with open(path, encoding="utf-8") as f:
            settings = yaml.safe_load(f) or {}

    cluster = settings.pop("cluster", None)
    if cluster is None and "rpc_url" not in settings:
        cluster = load_clusters()["default_cluster"]
    if cluster is not None:
        endpoint = get_cluster_endpoint(cluster)
        settings.setdefault("rpc_url", endpoint["rpc_url"])
        settings.setdefault("ws_url", endpoint.get("ws_url"))

    env_url = os.environ.get(RPC_URL_ENV_VAR)
    if env_url:
        settings["rpc_url"] = env_url
        # a cluster websocket would point at a different node
        if cluster is not None:
            settings["ws_url"] = None

    settings.update(overrides)
    return ClientConfig.model_validate(settings)
