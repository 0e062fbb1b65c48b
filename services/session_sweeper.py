"""Background task that evicts idle sessions from the store."""

from __future__ import annotations

import asyncio
import logging

from services.session_store import SessionStore

LOGGER = logging.getLogger(__name__)


class SessionSweeper:
    """Periodically remove sessions that have been idle longer than the TTL."""

    def __init__(self, store: SessionStore, interval_seconds: float | None = None) -> None:
        """
        Args:
            store: Session store to sweep.
            interval_seconds: Seconds between sweeps; defaults to the store TTL.
        """
        self._store = store
        self.interval_seconds = interval_seconds or store.ttl_seconds

    async def sweep_once(self) -> int:
        """Run a single sweep and return the number of sessions removed."""
        return await self._store.sweep_expired()

    async def run_periodic_sweep(self) -> None:
        """Sweep on a fixed interval until cancelled."""
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                await self.sweep_once()
            except asyncio.CancelledError:
                break
            except Exception:
                # Keep the loop alive; the next tick retries.
                LOGGER.exception("Session sweep failed")
