"""Session domain models for image-to-PDF conversations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class StoredImage:
	"""Normalized image held in a session until assembly.

	Attributes:
		content: Canonical JPEG bytes.
		width: Pixel width captured at normalization time.
		height: Pixel height captured at normalization time.
	"""

	content: bytes
	width: int
	height: int


@dataclass
class SessionState:
	"""In-memory buffer of images sent by one user."""

	user_id: str
	last_active_at: float
	images: List[StoredImage] = field(default_factory=list)
