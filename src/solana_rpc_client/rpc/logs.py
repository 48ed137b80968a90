"""Websocket stream delivering ``logsSubscribe`` notifications."""

import asyncio
import contextlib
import itertools
import json
import logging
from collections.abc import Callable
from typing import Any

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from solana_rpc_client.core.errors import RPCError
from solana_rpc_client.core.models import LogNotification

logger = logging.getLogger(__name__)

LogListener = Callable[[LogNotification], None]


class LogStream:
    """
    Multiplexes log subscriptions over a single websocket connection.

    The connection is opened on the first subscription and closed when the
    last listener is removed. Listeners are called from the reader task, one
    notification at a time. If the node drops the connection, its
    subscriptions are gone and the next subscription opens a new socket.

    Parameters
    ----------
    ws_url : str
        Websocket endpoint of the node
    connect_factory : Callable[[str], Any]
        Awaitable connection factory, ``websockets`` client by default

    """

    def __init__(self, ws_url: str, connect_factory: Callable[[str], Any] = connect) -> None:
        self.ws_url = ws_url
        self._connect = connect_factory
        self._ws: Any = None
        self._reader: asyncio.Task | None = None
        self._ids = itertools.count(1)
        self._pending: dict[int, asyncio.Future] = {}
        # logsSubscribe request id -> listener, registered when the reply arrives
        self._subscribing: dict[int, LogListener] = {}
        self._listeners: dict[int, LogListener] = {}
        self._connect_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._ws is not None

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def subscribe(self, topic: str, listener: LogListener, commitment: str) -> int:
        """
        Subscribe to logs of transactions mentioning ``topic``.

        Parameters
        ----------
        topic : str
            Program or account address
        listener : LogListener
            Called once per notification
        commitment : str
            Confidence level for delivered notifications

        Returns
        -------
        int
            Subscription id assigned by the node

        """
        handle = await self._call(
            "logsSubscribe",
            [{"mentions": [topic]}, {"commitment": str(commitment)}],
            listener=listener,
        )
        logger.debug("Log subscription %s registered for %s", handle, topic)
        return handle

    async def unsubscribe(self, handle: int) -> None:
        """
        Remove a listener and tell the node to stop sending its notifications.

        Raises
        ------
        KeyError
            If ``handle`` is not an active subscription

        """
        if handle not in self._listeners:
            raise KeyError(f"Unknown log subscription: {handle}")
        del self._listeners[handle]
        try:
            await self._call("logsUnsubscribe", [handle])
        finally:
            if not self._listeners:
                await self.close()

    async def close(self) -> None:
        """Close the websocket and fail any request still waiting for a reply."""
        ws, self._ws = self._ws, None
        reader, self._reader = self._reader, None
        self._listeners.clear()
        if ws is not None:
            await ws.close()
        if reader is not None:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
        self._fail_pending(ConnectionError("Log stream closed"))

    async def _ensure_connected(self) -> Any:
        async with self._connect_lock:
            if self._ws is None:
                logger.debug("Opening log stream to %s", self.ws_url)
                self._ws = await self._connect(self.ws_url)
                self._reader = asyncio.create_task(self._read_loop(self._ws))
            return self._ws

    async def _call(self, method: str, params: list[Any], listener: LogListener | None = None) -> Any:
        ws = await self._ensure_connected()
        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        if listener is not None:
            self._subscribing[request_id] = listener
        try:
            await ws.send(json.dumps({"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}))
            return await future
        finally:
            self._pending.pop(request_id, None)
            self._subscribing.pop(request_id, None)

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                try:
                    self._dispatch(json.loads(raw))
                except (ValueError, KeyError, TypeError, AttributeError) as e:
                    logger.warning("Ignoring malformed log stream message %r: %s", raw, e)
        except ConnectionClosed as e:
            logger.warning("Log stream to %s closed: %s", self.ws_url, e)
        except Exception:
            logger.exception("Log stream reader for %s failed", self.ws_url)
        finally:
            self._reset(ws)

    def _reset(self, ws: Any) -> None:
        # The node forgets subscriptions with the socket; the next call reconnects
        if self._ws is not ws:
            return
        if self._listeners:
            logger.warning(
                "Log stream to %s disconnected, dropping %d subscription(s)", self.ws_url, len(self._listeners)
            )
        self._ws = None
        self._reader = None
        self._listeners.clear()
        self._fail_pending(ConnectionError("Log stream disconnected"))

    def _dispatch(self, message: dict[str, Any]) -> None:
        request_id = message.get("id")
        if request_id is not None:
            future = self._pending.get(request_id)
            if future is None or future.done():
                return
            error = message.get("error")
            if error:
                future.set_exception(RPCError(error.get("code", -1), error.get("message", ""), error.get("data")))
                return
            result = message.get("result")
            listener = self._subscribing.pop(request_id, None)
            if listener is not None:
                # Notifications may directly follow the reply
                self._listeners[result] = listener
            future.set_result(result)
            return

        if message.get("method") != "logsNotification":
            return

        params = message["params"]
        listener = self._listeners.get(params["subscription"])
        if listener is None:
            logger.debug("Dropping notification for inactive subscription %s", params["subscription"])
            return

        result = params["result"]
        try:
            listener(LogNotification(slot=result["context"]["slot"], **result["value"]))
        except Exception:
            logger.exception("Log listener for subscription %s raised", params["subscription"])

    def _fail_pending(self, exc: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(exc)
