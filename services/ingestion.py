"""Fetch, normalize and buffer one inbound image for a user."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from services.image_normalizer import ImageNormalizer
from services.session_store import SessionStore
from utils.errors import BotError, CapacityExceeded, IngestRejected, RejectReason

LOGGER = logging.getLogger(__name__)


class FileFetcher(Protocol):
	async def download_file(self, file_id: str) -> bytes: ...


class IngestionPipeline:
	"""Add images to a user's session.

	The capacity check before downloading is only a fast path; `SessionStore.append`
	is what actually enforces the limit.
	"""

	def __init__(self, store: SessionStore, fetcher: FileFetcher, normalizer: ImageNormalizer) -> None:
		self.store = store
		self.fetcher = fetcher
		self.normalizer = normalizer

	async def ingest(self, user_id: str, file_id: str) -> int:
		"""Store the referenced image and return the user's new image count.

		Raises:
			IngestRejected: With reason CAPACITY_REACHED, FETCH_FAILED or DECODE_FAILED.
				The session is left unchanged.
		"""
		await self.store.get_or_create(user_id)
		if await self.store.image_count(user_id) >= self.store.max_images:
			raise IngestRejected(RejectReason.CAPACITY_REACHED, "Session is full")

		try:
			raw = await self.fetcher.download_file(file_id)
		except (BotError, OSError, asyncio.TimeoutError) as exc:
			LOGGER.warning("Fetching file %s for user %s failed: %s", file_id, user_id, exc)
			raise IngestRejected(RejectReason.FETCH_FAILED, str(exc)) from exc

		try:
			image = await asyncio.to_thread(self.normalizer.normalize, raw)
		except ValueError as exc:
			LOGGER.info("Rejected undecodable upload from user %s: %s", user_id, exc)
			raise IngestRejected(RejectReason.DECODE_FAILED, str(exc)) from exc

		try:
			count = await self.store.append(user_id, image)
		except CapacityExceeded as exc:
			raise IngestRejected(RejectReason.CAPACITY_REACHED, str(exc)) from exc

		LOGGER.info("Stored image %d/%d for user %s", count, self.store.max_images, user_id)
		return count
