"""Dispatch Telegram updates to the ingestion and assembly pipelines."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from models.telegram_update import TelegramMessage, TelegramUpdate
from services import bot_replies
from services.assembly import AssemblyPipeline
from services.ingestion import IngestionPipeline
from services.session_store import SessionStore
from utils.errors import AssemblyFailed, IngestRejected, TelegramError

LOGGER = logging.getLogger(__name__)

ACCEPTED_DOCUMENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}


class ReplySender(Protocol):
	async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str] = None) -> None: ...

	async def send_document(
		self, chat_id: int, filename: str, content: bytes, caption: Optional[str] = None
	) -> None: ...


def parse_command(text: str) -> Optional[str]:
	"""Return the lowercase command name of `/name@Bot args`, or None for plain text."""
	text = text.strip()
	if not text.startswith("/"):
		return None
	head = text.split(maxsplit=1)[0][1:]
	return head.split("@", 1)[0].lower() or None


class UpdateHandler:
	"""Handle one inbound update and send exactly one reply."""

	def __init__(
		self,
		store: SessionStore,
		ingestion: IngestionPipeline,
		assembly: AssemblyPipeline,
		sender: ReplySender,
	) -> None:
		self.store = store
		self.ingestion = ingestion
		self.assembly = assembly
		self.sender = sender

	async def handle(self, update: TelegramUpdate) -> None:
		"""Process a single update; failures are logged and answered, never raised."""
		message = update.message
		if message is None or message.from_user is None:
			return
		user_id = str(message.from_user.id)
		chat_id = message.chat.id
		try:
			await self._dispatch(user_id, chat_id, message)
		except Exception:
			LOGGER.exception("Unhandled error for update %s", update.update_id)
			await self._reply(chat_id, bot_replies.generic_error_text())

	async def _dispatch(self, user_id: str, chat_id: int, message: TelegramMessage) -> None:
		if message.photo:
			# Telegram lists photo sizes smallest first.
			largest = max(message.photo, key=lambda size: size.width * size.height)
			await self._ingest(user_id, chat_id, largest.file_id)
			return

		if message.document is not None:
			mime_type = (message.document.mime_type or "").lower()
			if mime_type not in ACCEPTED_DOCUMENT_TYPES:
				await self.store.get_or_create(user_id)
				await self._reply(chat_id, bot_replies.unsupported_document_text())
				return
			await self._ingest(user_id, chat_id, message.document.file_id)
			return

		await self.store.get_or_create(user_id)
		command = parse_command(message.text or "")
		max_images = self.store.max_images
		if command == "start":
			await self._reply(chat_id, bot_replies.start_text(max_images), parse_mode="Markdown")
		elif command == "help":
			await self._reply(chat_id, bot_replies.help_text(max_images), parse_mode="Markdown")
		elif command == "cancel":
			discarded = await self.store.clear(user_id)
			LOGGER.info("User %s cleared %d image(s)", user_id, discarded)
			await self._reply(chat_id, bot_replies.cleared_text())
		elif command == "convert":
			await self._convert(user_id, chat_id)
		else:
			await self._reply(chat_id, bot_replies.unknown_input_text())

	async def _ingest(self, user_id: str, chat_id: int, file_id: str) -> None:
		max_images = self.store.max_images
		try:
			count = await self.ingestion.ingest(user_id, file_id)
		except IngestRejected as exc:
			await self._reply(chat_id, bot_replies.rejection_text(exc.reason, max_images))
			return
		await self._reply(chat_id, bot_replies.image_added_text(count, max_images))

	async def _convert(self, user_id: str, chat_id: int) -> None:
		try:
			document = await self.assembly.assemble(user_id)
		except AssemblyFailed as exc:
			max_megabytes = self.assembly.max_document_bytes / (1024 * 1024)
			await self._reply(chat_id, bot_replies.assembly_failure_text(exc.reason, max_megabytes))
			return
		try:
			await self.sender.send_document(
				chat_id,
				document.filename,
				document.content,
				caption=bot_replies.document_caption(document.page_count),
			)
		except TelegramError:
			LOGGER.exception("Sending PDF to user %s failed", user_id)
			await self._reply(chat_id, bot_replies.generic_error_text())

	async def _reply(self, chat_id: int, text: str, parse_mode: Optional[str] = None) -> None:
		try:
			await self.sender.send_message(chat_id, text, parse_mode=parse_mode)
		except TelegramError as exc:
			LOGGER.error("Reply to chat %s failed: %s", chat_id, exc)
