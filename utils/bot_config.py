import os
from dataclasses import dataclass
from typing import Mapping, Optional

from services.telegram_client import DEFAULT_API_URL

BOT_MODES = ("webhook", "polling")


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} must be an integer") from exc
    if value <= 0:
        raise RuntimeError(f"{name}={raw!r} must be a positive integer")
    return value


@dataclass(frozen=True)
class BotConfig:
    """
    Runtime settings for the bot, read from environment variables.

    - BOT_TOKEN is required. A RuntimeError is raised if it is missing.
    - Numeric limits fall back to their defaults when unset and raise a
      RuntimeError naming the variable when they are not positive integers.
    - SESSION_TTL_SECONDS doubles as the interval of the expiry sweep.
    """

    bot_token: str
    session_ttl_seconds: int = 3600
    max_images_per_session: int = 50
    max_document_bytes: int = 45 * 1024 * 1024
    max_download_bytes: int = 20 * 1024 * 1024
    page_dpi: int = 150
    jpeg_quality: int = 90
    webhook_secret: Optional[str] = None
    bot_mode: str = "webhook"
    telegram_api_url: str = DEFAULT_API_URL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "BotConfig":
        env = os.environ if env is None else env

        token = (env.get("BOT_TOKEN") or "").strip()
        if not token:
            raise RuntimeError("BOT_TOKEN environment variable is not set")

        bot_mode = (env.get("BOT_MODE") or "webhook").strip().lower()
        if bot_mode not in BOT_MODES:
            raise RuntimeError(f"BOT_MODE={bot_mode!r} must be one of {', '.join(BOT_MODES)}")

        jpeg_quality = _int_setting(env, "JPEG_QUALITY", cls.jpeg_quality)
        if jpeg_quality > 95:
            raise RuntimeError(f"JPEG_QUALITY={jpeg_quality} must be at most 95")

        return cls(
            bot_token=token,
            session_ttl_seconds=_int_setting(env, "SESSION_TTL_SECONDS", cls.session_ttl_seconds),
            max_images_per_session=_int_setting(env, "MAX_IMAGES_PER_SESSION", cls.max_images_per_session),
            max_document_bytes=_int_setting(env, "MAX_DOCUMENT_BYTES", cls.max_document_bytes),
            max_download_bytes=_int_setting(env, "MAX_DOWNLOAD_BYTES", cls.max_download_bytes),
            page_dpi=_int_setting(env, "PAGE_DPI", cls.page_dpi),
            jpeg_quality=jpeg_quality,
            webhook_secret=(env.get("WEBHOOK_SECRET") or "").strip() or None,
            bot_mode=bot_mode,
            telegram_api_url=(env.get("TELEGRAM_API_URL") or DEFAULT_API_URL).strip(),
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )
