"""Lifecycle manager for filters and subscriptions.

Every resource the harness creates is released exactly once: after the
caller's single use, even when that use fails. A release that fails after a
successful use is a leaked resource and is reported as such.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Optional

from wallet_compliance.provider.base import Provider

logger = logging.getLogger(__name__)

HandleKind = Literal["filter", "blockFilter", "pendingTxFilter", "subscription"]

_CREATE_METHODS: dict[str, str] = {
    "filter": "eth_newFilter",
    "blockFilter": "eth_newBlockFilter",
    "pendingTxFilter": "eth_newPendingTransactionFilter",
    "subscription": "eth_subscribe",
}

DEFAULT_UNSUBSCRIBE_DELAY = 5.0


class LifecycleError(Exception):
    """A handle was misused (e.g. released twice)."""


class LeakedResourceError(Exception):
    """Releasing a provider resource failed, leaving it live."""

    def __init__(self, handle: "LifecycleHandle", reason: str, primary_error: Exception | None = None):
        self.handle = handle
        self.reason = reason
        self.primary_error = primary_error
        if primary_error is not None:
            message = (
                f"{str(primary_error) or type(primary_error).__name__}; "
                f"additionally failed to release {handle.kind} {handle.resource_id}: {reason}"
            )
        else:
            message = f"Failed to release {handle.kind} {handle.resource_id}: {reason}"
        super().__init__(message)


@dataclass
class LifecycleHandle:
    resource_id: str
    kind: HandleKind
    released: bool = field(default=False, init=False)

    @property
    def release_method(self) -> str:
        return "eth_unsubscribe" if self.kind == "subscription" else "eth_uninstallFilter"


class LifecycleManager:
    """Creates, hands out and releases filters/subscriptions on one provider."""

    def __init__(self, provider: Provider):
        self.provider = provider
        self._open: dict[int, LifecycleHandle] = {}
        self._pending: set[asyncio.Task] = set()

    def open_handles(self) -> list[LifecycleHandle]:
        """Handles created but not yet released."""
        return list(self._open.values())

    async def create(
        self, kind: HandleKind, filter_spec: Optional[dict] = None, topic: str = "newHeads",
    ) -> LifecycleHandle:
        method = _CREATE_METHODS[kind]
        if kind == "filter":
            params: list = [filter_spec or {"fromBlock": "latest", "toBlock": "latest"}]
        elif kind == "subscription":
            params = [topic]
        else:
            params = []
        resource_id = await self.provider.request(method, params)
        if not resource_id:
            raise LifecycleError(f"{method} returned no resource id")
        handle = LifecycleHandle(resource_id=str(resource_id), kind=kind)
        self._open[id(handle)] = handle
        logger.debug("Created %s %s", kind, handle.resource_id)
        return handle

    async def release(self, handle: LifecycleHandle) -> None:
        """Release a handle once. Raises LeakedResourceError if the provider fails to."""
        if handle.released:
            raise LifecycleError(f"{handle.kind} {handle.resource_id} already released")
        handle.released = True
        self._open.pop(id(handle), None)
        try:
            ok = await self.provider.request(handle.release_method, [handle.resource_id])
        except Exception as e:
            raise LeakedResourceError(handle, str(e) or type(e).__name__) from e
        if ok is False:
            raise LeakedResourceError(handle, f"{handle.release_method} returned false")
        logger.debug("Released %s %s", handle.kind, handle.resource_id)

    async def _scoped(self, handle: LifecycleHandle, use: Callable[[str], Awaitable[Any]]) -> Any:
        try:
            result = await use(handle.resource_id)
        except Exception as use_error:
            try:
                await self.release(handle)
            except LeakedResourceError as leak:
                raise LeakedResourceError(handle, leak.reason, primary_error=use_error) from use_error
            raise
        await self.release(handle)
        return result

    async def with_filter(
        self,
        kind: HandleKind,
        use: Callable[[str], Awaitable[Any]],
        filter_spec: Optional[dict] = None,
    ) -> Any:
        """Create a filter, run ``use(filter_id)``, always uninstall it."""
        if kind == "subscription":
            raise ValueError("use with_subscription for subscriptions")
        handle = await self.create(kind, filter_spec=filter_spec)
        return await self._scoped(handle, use)

    async def with_subscription(
        self, use: Callable[[str], Awaitable[Any]], topic: str = "newHeads",
    ) -> Any:
        handle = await self.create("subscription", topic=topic)
        return await self._scoped(handle, use)

    async def subscribe_with_delayed_release(
        self, topic: str = "newHeads", delay: float = DEFAULT_UNSUBSCRIBE_DELAY,
    ) -> LifecycleHandle:
        """Subscribe now, unsubscribe after ``delay`` seconds in the background.

        The background release is fire-and-forget: failures are logged only.
        """
        handle = await self.create("subscription", topic=topic)
        task = asyncio.create_task(self._release_later(handle, delay))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return handle

    async def _release_later(self, handle: LifecycleHandle, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.release(handle)
        except (LeakedResourceError, LifecycleError) as e:
            logger.warning("Delayed unsubscribe failed: %s", e)

    async def drain(self) -> None:
        """Wait for scheduled background releases to finish."""
        if self._pending:
            logger.debug("Waiting for %d scheduled releases", len(self._pending))
            await asyncio.gather(*list(self._pending))
