"""Long-polling loop for running the bot without a public webhook."""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from controllers.bot_controller import UpdateHandler
from models.telegram_update import TelegramUpdate
from services.telegram_client import TelegramClient
from utils.errors import TelegramError

LOGGER = logging.getLogger(__name__)


class UpdatePoller:
    """Fetch updates with getUpdates and hand each one to its own task."""

    def __init__(self, client: TelegramClient, handler: UpdateHandler, retry_seconds: float = 5.0) -> None:
        self._client = client
        self._handler = handler
        self.retry_seconds = retry_seconds
        self._offset: int | None = None
        self._tasks: set[asyncio.Task] = set()

    async def poll_once(self) -> int:
        """Fetch one batch, schedule its handlers and return the batch size."""
        raw_updates = await self._client.get_updates(offset=self._offset)
        for raw in raw_updates:
            update_id = raw.get("update_id")
            if isinstance(update_id, int):
                self._offset = update_id + 1
            try:
                update = TelegramUpdate.model_validate(raw)
            except ValidationError as exc:
                LOGGER.warning("Skipping malformed update %s: %s", update_id, exc)
                continue
            task = asyncio.create_task(self._handler.handle(update))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return len(raw_updates)

    async def run(self) -> None:
        """Poll until cancelled, then stop and await any in-flight handlers."""
        try:
            await self._client.delete_webhook()
        except TelegramError as exc:
            LOGGER.warning("Could not remove webhook before polling: %s", exc)
        LOGGER.info("Polling for updates")
        try:
            while True:
                try:
                    await self.poll_once()
                except TelegramError as exc:
                    LOGGER.error("Polling failed: %s", exc)
                    await asyncio.sleep(self.retry_seconds)
                except Exception:
                    LOGGER.exception("Unexpected error while polling")
                    await asyncio.sleep(self.retry_seconds)
        except asyncio.CancelledError:
            pass
        finally:
            await self._stop_handlers()

    async def _stop_handlers(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
