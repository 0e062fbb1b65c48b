"""Typed failures raised by the session store and the conversion pipelines."""

from __future__ import annotations

from enum import Enum


class BotError(Exception):
	"""Base class for expected bot failures."""


class CapacityExceeded(BotError):
	"""A session already holds the maximum number of images."""

	def __init__(self, user_id: str, limit: int) -> None:
		super().__init__(f"Session {user_id} already holds {limit} images")
		self.user_id = user_id
		self.limit = limit


class DocumentSizeExceeded(BotError):
	"""The document being written grew past its byte ceiling."""

	def __init__(self, written: int, limit: int) -> None:
		super().__init__(f"Document reached {written} bytes, limit is {limit}")
		self.written = written
		self.limit = limit


class RejectReason(str, Enum):
	CAPACITY_REACHED = "capacity_reached"
	FETCH_FAILED = "fetch_failed"
	DECODE_FAILED = "decode_failed"


class FailureReason(str, Enum):
	NO_IMAGES = "no_images"
	SIZE_LIMIT_EXCEEDED = "size_limit_exceeded"
	INTERNAL_FAILURE = "internal_failure"


class IngestRejected(BotError):
	"""An inbound image was not added to the session."""

	def __init__(self, reason: RejectReason, detail: str = "") -> None:
		super().__init__(detail or reason.value)
		self.reason = reason


class AssemblyFailed(BotError):
	"""No document could be produced from the session."""

	def __init__(self, reason: FailureReason, detail: str = "") -> None:
		super().__init__(detail or reason.value)
		self.reason = reason


class TelegramError(BotError):
	"""The Bot API call failed or returned ok=false."""

	def __init__(self, method: str, detail: str) -> None:
		super().__init__(f"{method}: {detail}")
		self.method = method
