"""Assemble a user's buffered images into one size-bounded PDF."""

from __future__ import annotations

import asyncio
import io
import logging
import os
from dataclasses import dataclass

from services.document_writer import PdfDocumentWriter
from services.session_store import SessionStore
from utils.errors import AssemblyFailed, DocumentSizeExceeded, FailureReason

LOGGER = logging.getLogger(__name__)

DOCUMENT_FILENAME = "images.pdf"


@dataclass(frozen=True)
class AssembledDocument:
	"""Finished PDF ready to be sent back to the user."""

	content: bytes
	page_count: int
	filename: str = DOCUMENT_FILENAME


class ByteBudgetSink:
	"""Binary sink that refuses to grow past `limit` bytes.

	The running total is checked on every chunk the writer emits; the chunk
	that would cross the limit raises `DocumentSizeExceeded` and is dropped,
	so the buffer never holds more than `limit` bytes.
	"""

	def __init__(self, limit: int) -> None:
		if limit <= 0:
			raise ValueError("limit must be positive")
		self.limit = limit
		self._buffer = io.BytesIO()

	@property
	def written(self) -> int:
		return self._buffer.getbuffer().nbytes

	def write(self, chunk: bytes) -> int:
		size = len(chunk)
		end = self._buffer.seek(0, os.SEEK_END)
		if end + size > self.limit:
			raise DocumentSizeExceeded(end + size, self.limit)
		return self._buffer.write(chunk)

	def tell(self) -> int:
		return self._buffer.tell()

	def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
		return self._buffer.seek(offset, whence)

	def flush(self) -> None:
		pass

	def getvalue(self) -> bytes:
		return self._buffer.getvalue()


class AssemblyPipeline:
	"""Drain a session and turn its images into a PDF within a byte ceiling.

	Drained images are consumed: if writing fails they are not put back, and
	the user has to send them again.
	"""

	def __init__(self, store: SessionStore, writer: PdfDocumentWriter, max_document_bytes: int) -> None:
		self.store = store
		self.writer = writer
		self.max_document_bytes = max_document_bytes

	async def assemble(self, user_id: str) -> AssembledDocument:
		"""Return the user's images as one PDF and leave the session empty.

		Raises:
			AssemblyFailed: With reason NO_IMAGES, SIZE_LIMIT_EXCEEDED or INTERNAL_FAILURE.
		"""
		images = await self.store.take_all_and_clear(user_id)
		if not images:
			raise AssemblyFailed(FailureReason.NO_IMAGES, "No images to convert")

		sink = ByteBudgetSink(self.max_document_bytes)
		try:
			page_count = await asyncio.to_thread(self.writer.write, images, sink)
		except DocumentSizeExceeded as exc:
			LOGGER.warning(
				"Assembly for user %s aborted after %d bytes: %s", user_id, sink.written, exc
			)
			raise AssemblyFailed(FailureReason.SIZE_LIMIT_EXCEEDED, str(exc)) from exc
		except Exception as exc:
			LOGGER.exception("Writing PDF for user %s failed", user_id)
			raise AssemblyFailed(FailureReason.INTERNAL_FAILURE, "Failed to create PDF") from exc

		content = sink.getvalue()
		LOGGER.info("Assembled %d page(s), %d bytes for user %s", page_count, len(content), user_id)
		return AssembledDocument(content=content, page_count=page_count)
