# wishlist_api/main.py
from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from wishlist_api.config import settings
from wishlist_api.database import db
from wishlist_api.api.errors import register_exception_handlers
from wishlist_api.api.routes import wishlist as wishlist_routes
from wishlist_api.middleware.cors_config import configure_cors
from wishlist_api.middleware.request_logging import add_request_logging


logger = logging.getLogger("uvicorn.error")
logger.getChild("wishlist_api").setLevel(settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: run startup checks before the app starts serving,
    and allow for clean shutdown actions if needed later.
    """
    # --- startup logic ---
    wishlists_path = db._file_path("wishlists")
    if not wishlists_path.exists():
        logger.warning(
            "Wishlists file not found at %s; it will be created on the first write (or run scripts/init_db.py).",
            wishlists_path,
        )
    else:
        logger.info("Found wishlists file: %s", wishlists_path)
    logger.info(
        "Wishlist limits: max %d items per wishlist, %d write attempts on conflict",
        settings.WISHLIST_MAX_ITEMS,
        settings.WISHLIST_MAX_ATTEMPTS,
    )

    yield
    # --- shutdown logic (if needed) ---
    logger.info("Shutting down Wishlist API")
app = FastAPI(title="Wishlist API", version="0.1.0", lifespan=lifespan)
configure_cors(app, settings)
add_request_logging(app)
register_exception_handlers(app)

app.include_router(wishlist_routes.router)


@app.get("/", tags=["root"])
async def root():
    return {"status": "ok", "service": "Wishlist API"}
