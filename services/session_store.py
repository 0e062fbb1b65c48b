"""In-memory store for per-user image sessions.

Each user id maps to a `SessionState`. Every operation on a user's session is
serialized through that user's `asyncio.Lock`; unrelated users never contend.
Locks are kept in a `WeakValueDictionary` so they disappear once no coroutine
holds or waits on them.
"""

from __future__ import annotations

import asyncio
import logging
import time
import weakref
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from models.session_models import SessionState, StoredImage
from utils.errors import CapacityExceeded

LOGGER = logging.getLogger(__name__)


class SessionStore:
	"""Own the user id -> session mapping, its capacity limit and its expiry."""

	def __init__(
		self,
		max_images: int = 50,
		ttl_seconds: float = 3600,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		if max_images <= 0:
			raise ValueError("max_images must be positive")
		if ttl_seconds <= 0:
			raise ValueError("ttl_seconds must be positive")
		self.max_images = max_images
		self.ttl_seconds = ttl_seconds
		self._clock = clock
		self._sessions: Dict[str, SessionState] = {}
		self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

	def __len__(self) -> int:
		return len(self._sessions)

	def _lock_for(self, user_id: str) -> asyncio.Lock:
		lock = self._locks.get(user_id)
		if lock is None:
			lock = asyncio.Lock()
			self._locks[user_id] = lock
		return lock

	def has_session(self, user_id: str) -> bool:
		return user_id in self._sessions

	async def get_or_create(self, user_id: str) -> SessionState:
		"""Mark the user active, creating the session if needed, and return a snapshot of it.

		The snapshot is detached from the store; changing it does not affect the session.
		"""
		async with self._lock_for(user_id):
			state = self._touch(user_id)
			return replace(state, images=list(state.images))

	def _touch(self, user_id: str) -> SessionState:
		now = self._clock()
		state = self._sessions.get(user_id)
		if state is None:
			state = SessionState(user_id=user_id, last_active_at=now)
			self._sessions[user_id] = state
		else:
			state.last_active_at = now
		return state

	async def image_count(self, user_id: str) -> int:
		"""Return how many images the user has buffered (0 for unknown users)."""
		async with self._lock_for(user_id):
			state = self._sessions.get(user_id)
			return len(state.images) if state else 0

	async def append(self, user_id: str, image: StoredImage) -> int:
		"""Append an image and return the new count.

		Raises:
			CapacityExceeded: If the session already holds `max_images` images.
		"""
		async with self._lock_for(user_id):
			state = self._touch(user_id)
			if len(state.images) >= self.max_images:
				raise CapacityExceeded(user_id, self.max_images)
			state.images.append(image)
			return len(state.images)

	async def clear(self, user_id: str) -> int:
		"""Drop every buffered image and return how many were discarded."""
		async with self._lock_for(user_id):
			state = self._sessions.get(user_id)
			if state is None:
				return 0
			discarded = len(state.images)
			state.images = []
			return discarded

	async def take_all_and_clear(self, user_id: str) -> List[StoredImage]:
		"""Return the buffered images in insertion order and empty the session."""
		async with self._lock_for(user_id):
			state = self._sessions.get(user_id)
			if state is None or not state.images:
				return []
			images, state.images = state.images, []
			return images

	def _is_expired(self, state: SessionState, now: float) -> bool:
		return now - state.last_active_at > self.ttl_seconds

	async def sweep_expired(self, now: Optional[float] = None) -> int:
		"""Remove sessions idle for longer than the TTL and return how many were removed."""
		now = self._clock() if now is None else now
		candidates = [user_id for user_id, state in self._sessions.items() if self._is_expired(state, now)]
		removed = 0
		for user_id in candidates:
			async with self._lock_for(user_id):
				state = self._sessions.get(user_id)
				# Activity may have happened while waiting for the lock.
				if state is None or not self._is_expired(state, now):
					continue
				del self._sessions[user_id]
				removed += 1
		if removed:
			LOGGER.info("Swept %d expired session(s), %d remaining", removed, len(self._sessions))
		return removed

	async def shutdown(self) -> int:
		"""Drop all sessions and return the number of images that were still buffered."""
		discarded = 0
		for user_id in list(self._sessions):
			async with self._lock_for(user_id):
				state = self._sessions.pop(user_id, None)
				if state is not None:
					discarded += len(state.images)
		if discarded:
			LOGGER.warning("Discarded %d buffered image(s) on shutdown", discarded)
		return discarded
