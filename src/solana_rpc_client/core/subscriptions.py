"""Log subscription lifecycle with callback isolation."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from solana_rpc_client.core.models import LogNotification

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[str, BaseException], None]
LogCallback = Callable[[LogNotification], None]

CALLBACK_FAILURE = "subscription_callback"
DISPOSAL_FAILURE = "subscription_dispose"


def log_error(context: str, exc: BaseException) -> None:
    """Default error reporter: log the contained failure with its traceback."""
    logger.error("%s failed: %s", context, exc, exc_info=exc)


class Subscription:
    """
    A registered log listener and the handle that removes it.

    Awaiting ``dispose()`` (or the subscription itself) unregisters the
    listener once. Later calls do nothing, and a failure while unregistering
    is reported rather than raised.

    Parameters
    ----------
    topic : str
        Program or account address the listener watches
    callback : LogCallback
        User callback, invoked once per notification
    unregister : Callable[[Any], Awaitable[None]]
        Transport hook that removes the listener for a handle
    on_error : ErrorReporter
        Receives contained callback and disposal failures

    """

    def __init__(
        self,
        topic: str,
        callback: LogCallback,
        unregister: Callable[[Any], Awaitable[None]],
        on_error: ErrorReporter,
    ) -> None:
        self.topic = topic
        self.handle: Any = None
        self._callback = callback
        self._unregister = unregister
        self._on_error = on_error
        self._disposed = False
        self._on_disposed: Callable[["Subscription"], None] | None = None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def deliver(self, notification: LogNotification) -> None:
        """Invoke the user callback, reporting instead of raising its failures."""
        if self._disposed:
            return
        try:
            self._callback(notification)
        except Exception as e:
            self._on_error(CALLBACK_FAILURE, e)

    async def dispose(self) -> None:
        """Unregister the listener. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        try:
            await self._unregister(self.handle)
        except Exception as e:
            self._on_error(DISPOSAL_FAILURE, e)
        finally:
            if self._on_disposed is not None:
                self._on_disposed(self)

    async def __call__(self) -> None:
        await self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Subscription(topic={self.topic!r}, handle={self.handle!r}, {state})"


class SubscriptionManager:
    """
    Registers log listeners with a transport and tracks the live ones.

    Parameters
    ----------
    transport : Any
        Transport exposing ``subscribe_logs`` and ``unsubscribe_logs``
    commitment : str
        Confidence level used for every subscription
    on_error : ErrorReporter | None
        Receives contained failures. Logs them if None.

    """

    def __init__(self, transport: Any, commitment: str, on_error: ErrorReporter | None = None) -> None:
        self.transport = transport
        self.commitment = commitment
        self.on_error = on_error or log_error
        self._active: list[Subscription] = []

    @property
    def active(self) -> list[Subscription]:
        return list(self._active)

    async def subscribe(self, topic: str, callback: LogCallback) -> Subscription:
        """
        Register ``callback`` for log notifications mentioning ``topic``.

        Parameters
        ----------
        topic : str
            Program or account address
        callback : LogCallback
            Called once per notification; its exceptions are reported, not raised

        Returns
        -------
        Subscription
            Disposer for the registration

        """
        subscription = Subscription(topic, callback, self.transport.unsubscribe_logs, self.on_error)
        subscription.handle = await self.transport.subscribe_logs(topic, subscription.deliver, self.commitment)
        subscription._on_disposed = self._forget
        self._active.append(subscription)
        logger.debug("Subscribed to logs for %s (handle %s)", topic, subscription.handle)
        return subscription

    async def dispose_all(self) -> None:
        """Dispose every live subscription."""
        for subscription in self.active:
            await subscription.dispose()

    def _forget(self, subscription: Subscription) -> None:
        if subscription in self._active:
            self._active.remove(subscription)
