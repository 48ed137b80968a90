"""JSON-RPC transport for Solana nodes."""

import itertools
import logging
from collections.abc import Callable
from typing import Any, Protocol

import httpx

from solana_rpc_client.core.errors import RPCError
from solana_rpc_client.core.models import AccountInfo, Block, LogNotification, TransactionRecord
from solana_rpc_client.rpc.logs import LogStream

logger = logging.getLogger(__name__)


class RPCTransport(Protocol):
    """
    Capabilities the client needs from the underlying service.

    Transports may also expose ``async get_health() -> str``; the client
    probes for it and falls back to ``get_slot`` when it is missing.
    """

    async def get_account_info(self, address: str, commitment: str) -> AccountInfo | None: ...

    async def get_balance(self, address: str, commitment: str) -> int: ...

    async def get_block(
        self, slot: int, commitment: str, max_supported_transaction_version: int | None
    ) -> Block | None: ...

    async def get_transaction(
        self, signature: str, commitment: str, max_supported_transaction_version: int | None
    ) -> TransactionRecord | None: ...

    async def get_slot(self, commitment: str) -> int: ...

    async def subscribe_logs(
        self, topic: str, callback: Callable[[LogNotification], None], commitment: str
    ) -> Any: ...

    async def unsubscribe_logs(self, handle: Any) -> None: ...

    async def close(self) -> None: ...


def derive_ws_url(rpc_url: str) -> str:
    """
    Derive the websocket endpoint from an HTTP endpoint.

    Parameters
    ----------
    rpc_url : str
        HTTP(S) JSON-RPC endpoint

    Returns
    -------
    str
        Same endpoint with ``http`` replaced by ``ws`` (``https`` by ``wss``)

    """
    if rpc_url.startswith("https://"):
        return "wss://" + rpc_url[len("https://") :]
    if rpc_url.startswith("http://"):
        return "ws://" + rpc_url[len("http://") :]
    return rpc_url


def _unwrap(result: Any) -> Any:
    # Some methods wrap their payload as {"context": {...}, "value": ...}
    if isinstance(result, dict) and "context" in result and "value" in result:
        return result["value"]
    return result


class HttpRPCTransport:
    """
    Solana JSON-RPC over HTTP, with log subscriptions over a websocket.

    Parameters
    ----------
    rpc_url : str
        HTTP JSON-RPC endpoint
    ws_url : str | None
        Websocket endpoint. Derived from ``rpc_url`` if None.
    timeout : float
        HTTP request timeout in seconds
    client : httpx.AsyncClient | None
        Pre-built HTTP client. The transport only closes clients it created.
    log_stream : LogStream | None
        Pre-built subscription stream

    """

    def __init__(
        self,
        rpc_url: str,
        ws_url: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        log_stream: LogStream | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.ws_url = ws_url or derive_ws_url(rpc_url)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.log_stream = log_stream or LogStream(self.ws_url)
        self._ids = itertools.count(1)

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Send a single JSON-RPC request.

        Parameters
        ----------
        method : str
            RPC method name (e.g., 'getBalance')
        params : list[Any] | None
            Method parameters

        Returns
        -------
        Any
            The ``result`` member of the reply

        Raises
        ------
        httpx.HTTPError
            On connection failures and non-2xx replies
        RPCError
            If the reply carries a JSON-RPC error object

        """
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": next(self._ids), "method": method}
        if params is not None:
            payload["params"] = params

        logger.debug("RPC request %s %s", method, params)
        response = await self.client.post(self.rpc_url, json=payload)
        response.raise_for_status()

        body = response.json()
        error = body.get("error")
        if error:
            raise RPCError(error.get("code", -1), error.get("message", ""), error.get("data"))
        return body.get("result")

    async def get_account_info(self, address: str, commitment: str) -> AccountInfo | None:
        result = await self.request("getAccountInfo", [address, {"encoding": "base64", "commitment": str(commitment)}])
        value = _unwrap(result)
        return AccountInfo.model_validate(value) if value is not None else None

    async def get_balance(self, address: str, commitment: str) -> int:
        result = await self.request("getBalance", [address, {"commitment": str(commitment)}])
        return int(_unwrap(result))

    async def get_block(
        self, slot: int, commitment: str, max_supported_transaction_version: int | None = 0
    ) -> Block | None:
        options = self._versioned_options(commitment, max_supported_transaction_version)
        result = await self.request("getBlock", [slot, options])
        return Block.model_validate(result) if result is not None else None

    async def get_transaction(
        self, signature: str, commitment: str, max_supported_transaction_version: int | None = 0
    ) -> TransactionRecord | None:
        options = self._versioned_options(commitment, max_supported_transaction_version)
        result = await self.request("getTransaction", [signature, options])
        return TransactionRecord.model_validate(result) if result is not None else None

    async def get_slot(self, commitment: str) -> int:
        return int(await self.request("getSlot", [{"commitment": str(commitment)}]))

    async def get_health(self) -> str:
        return await self.request("getHealth")

    async def subscribe_logs(
        self, topic: str, callback: Callable[[LogNotification], None], commitment: str
    ) -> int:
        return await self.log_stream.subscribe(topic, callback, commitment)

    async def unsubscribe_logs(self, handle: int) -> None:
        await self.log_stream.unsubscribe(handle)

    async def close(self) -> None:
        """Close the log stream and the HTTP client."""
        await self.log_stream.close()
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "HttpRPCTransport":
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        await self.close()

    @staticmethod
    def _versioned_options(commitment: str, max_supported_transaction_version: int | None) -> dict[str, Any]:
        options: dict[str, Any] = {"commitment": str(commitment)}
        if max_supported_transaction_version is not None:
            options["maxSupportedTransactionVersion"] = max_supported_transaction_version
        return options
