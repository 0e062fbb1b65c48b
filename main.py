import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from controllers.bot_controller import UpdateHandler
from routes.webhook_route import router as webhook_router
from services.assembly import AssemblyPipeline
from services.document_writer import PdfDocumentWriter
from services.image_normalizer import ImageNormalizer
from services.ingestion import IngestionPipeline
from services.session_store import SessionStore
from services.session_sweeper import SessionSweeper
from services.telegram_client import TelegramClient
from services.update_poller import UpdatePoller
from utils.bot_config import BotConfig

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the bot configuration (from the environment)
      - the in-memory session store and its expiry sweeper
      - the Telegram client, pipelines and update handler
    and attach them to `app.state`.
    """
    config = getattr(app.state, "config", None) or BotConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = SessionStore(
        max_images=config.max_images_per_session,
        ttl_seconds=config.session_ttl_seconds,
    )
    telegram_client = TelegramClient(
        config.bot_token,
        api_url=config.telegram_api_url,
        max_download_bytes=config.max_download_bytes,
    )
    ingestion = IngestionPipeline(store, telegram_client, ImageNormalizer(quality=config.jpeg_quality))
    assembly = AssemblyPipeline(
        store,
        PdfDocumentWriter(page_dpi=config.page_dpi),
        max_document_bytes=config.max_document_bytes,
    )
    handler = UpdateHandler(store, ingestion, assembly, telegram_client)

    app.state.config = config
    app.state.session_store = store
    app.state.telegram_client = telegram_client
    app.state.update_handler = handler
    app.state.webhook_secret = config.webhook_secret

    tasks: List[asyncio.Task] = [
        asyncio.create_task(SessionSweeper(store).run_periodic_sweep()),
    ]
    if config.bot_mode == "polling":
        tasks.append(asyncio.create_task(UpdatePoller(telegram_client, handler).run()))
    LOGGER.info(
        "Bot started in %s mode (ttl=%ss, max_images=%d, max_document_bytes=%d)",
        config.bot_mode,
        config.session_ttl_seconds,
        config.max_images_per_session,
        config.max_document_bytes,
    )

    try:
        yield
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await store.shutdown()
        try:
            await telegram_client.aclose()
        except Exception:
            LOGGER.exception("Failed to close the Telegram client")


def create_app(config: Optional[BotConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)
    if config is not None:
        app.state.config = config

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports whether the bot is wired and how many sessions are live.
        """
        store = getattr(request.app.state, "session_store", None)
        return {
            "ok": True,
            "bot_initialized": getattr(request.app.state, "update_handler", None) is not None,
            "active_sessions": len(store) if store is not None else 0,
        }

    # Register application routers
    app.include_router(webhook_router)

    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
