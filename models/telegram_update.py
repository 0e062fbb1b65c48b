"""Pydantic models for the subset of the Telegram Update payload the bot reads."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
	model_config = ConfigDict(extra="ignore")

	id: int
	username: Optional[str] = None


class TelegramChat(BaseModel):
	model_config = ConfigDict(extra="ignore")

	id: int


class PhotoSize(BaseModel):
	model_config = ConfigDict(extra="ignore")

	file_id: str
	width: int = 0
	height: int = 0
	file_size: Optional[int] = None


class TelegramDocument(BaseModel):
	model_config = ConfigDict(extra="ignore")

	file_id: str
	file_name: Optional[str] = None
	mime_type: Optional[str] = None
	file_size: Optional[int] = None


class TelegramMessage(BaseModel):
	model_config = ConfigDict(extra="ignore", populate_by_name=True)

	message_id: int
	chat: TelegramChat
	from_user: Optional[TelegramUser] = Field(default=None, alias="from")
	text: Optional[str] = None
	photo: List[PhotoSize] = Field(default_factory=list)
	document: Optional[TelegramDocument] = None


class TelegramUpdate(BaseModel):
	"""One inbound update; only plain messages are handled."""

	model_config = ConfigDict(extra="ignore")

	update_id: int
	message: Optional[TelegramMessage] = None
