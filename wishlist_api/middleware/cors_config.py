from fastapi.middleware.cors import CORSMiddleware

from wishlist_api.config import Settings


def configure_cors(app, settings: Settings):
    origins = settings.cors_origins()
    # TODO : in production, set CORS_ORIGINS to the storefront origins that call this API
    if not origins:
        origins = ["http://localhost:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )
