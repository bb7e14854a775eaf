import logging
import time

from fastapi import Request

# child of uvicorn.error so records reach the handlers uvicorn installs
logger = logging.getLogger("uvicorn.error").getChild("wishlist_api.access")


def add_request_logging(app):
    @app.middleware("http")
    async def request_logging_mw(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"
        return response
