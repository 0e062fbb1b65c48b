"""FastAPI routes receiving Telegram webhook updates."""

import hmac
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse

from controllers.bot_controller import UpdateHandler
from models.telegram_update import TelegramUpdate

router = APIRouter(prefix="/webhook")


def _require_update_handler(request: Request) -> UpdateHandler:
	handler = getattr(request.app.state, "update_handler", None)
	if handler is None:
		raise HTTPException(status_code=503, detail="Bot is not initialized")
	return handler


@router.post("")
async def telegram_webhook(
	request: Request,
	update: TelegramUpdate,
	secret_token: Optional[str] = Header(default=None, alias="X-Telegram-Bot-Api-Secret-Token"),
):
	"""Handle one Telegram update delivered by webhook."""
	expected = getattr(request.app.state, "webhook_secret", None)
	if expected and not hmac.compare_digest(secret_token or "", expected):
		raise HTTPException(status_code=403, detail="Invalid secret token")
	handler = _require_update_handler(request)
	try:
		await handler.handle(update)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
	return {"ok": True}


@router.get("", response_class=PlainTextResponse)
async def webhook_info():
	return "Use POST requests only"
