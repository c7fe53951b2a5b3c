"""Delivery authorization tracking and prompting."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from wastetrack.domain.entities import PermissionState
from wastetrack.infrastructure.storage import PERMISSION_KEY, KeyValueStore

from .manager import ClientConnectionManager

logger = logging.getLogger(__name__)


class PermissionPlatform(Protocol):
    """Platform API owning the notification permission state."""

    def current_state(self) -> PermissionState: ...

    async def request(self) -> PermissionState: ...


class PermissionGate:
    """Mirror the platform permission state and prompt at most once at a time.

    A ``denied`` state is final: the platform will not show the prompt again,
    so the gate never asks. Callers arriving while a prompt is pending share
    its outcome.
    """

    def __init__(self, platform: PermissionPlatform) -> None:
        self._platform = platform
        self._pending: asyncio.Future[bool] | None = None

    @property
    def state(self) -> PermissionState:
        return self._platform.current_state()

    def has_permission(self) -> bool:
        return self._platform.current_state() is PermissionState.GRANTED

    async def request(self) -> bool:
        state = self._platform.current_state()
        if state is PermissionState.GRANTED:
            return True
        if state is PermissionState.DENIED:
            return False

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._prompt())
        return await asyncio.shield(self._pending)

    async def _prompt(self) -> bool:
        try:
            outcome = PermissionState(await self._platform.request())
        except Exception:
            logger.exception("Notification permission prompt failed")
            return False
        finally:
            self._pending = None

        logger.info("Notification permission prompt answered: %s", outcome.value)
        return outcome is PermissionState.GRANTED


class ClientPermissionPlatform:
    """Permission API backed by the connected application client.

    The client reports its browser permission state, which is persisted so it
    survives restarts. Prompting asks the connected clients over the websocket
    and waits for the first answer reported back through :meth:`report`.
    """

    def __init__(
        self,
        store: KeyValueStore,
        connections: ClientConnectionManager,
        *,
        prompt_timeout: float,
    ) -> None:
        self._store = store
        self._connections = connections
        self._prompt_timeout = prompt_timeout
        self._answer: asyncio.Future[PermissionState] | None = None

    def current_state(self) -> PermissionState:
        raw = self._store.get(PERMISSION_KEY)
        if raw is None:
            return PermissionState.DEFAULT
        try:
            return PermissionState(raw)
        except ValueError:
            logger.warning("Ignoring unknown stored permission state %r", raw)
            return PermissionState.DEFAULT

    def report(self, state: PermissionState) -> None:
        """Record the state announced by the client and resolve a pending prompt.

        Safe to call from worker threads; the pending prompt is resolved on the
        event loop that created it.
        """

        state = PermissionState(state)
        self._store.set(PERMISSION_KEY, state.value)
        answer = self._answer
        if answer is None or answer.done():
            return
        loop = answer.get_loop()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            _resolve(answer, state)
        else:
            loop.call_soon_threadsafe(_resolve, answer, state)

    async def request(self) -> PermissionState:
        if not self._connections.has_connections():
            logger.info("No client connected; permission prompt not shown")
            return self.current_state()

        self._answer = asyncio.get_running_loop().create_future()
        try:
            delivered = await self._connections.broadcast({"type": "permission.request"})
            if not delivered:
                return self.current_state()
            return await asyncio.wait_for(asyncio.shield(self._answer), self._prompt_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "No permission answer within %.0f seconds", self._prompt_timeout
            )
            return self.current_state()
        finally:
            self._answer = None


def _resolve(answer: asyncio.Future[PermissionState], state: PermissionState) -> None:
    if not answer.done():
        answer.set_result(state)


__all__ = ["ClientPermissionPlatform", "PermissionGate", "PermissionPlatform"]
