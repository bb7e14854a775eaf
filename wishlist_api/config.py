# wishlist_api/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from pathlib import Path
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    ENV: str = "development"
    DATA_DIR: Path = Path("data")  # where the CSV tables live
    WISHLISTS_FILE: str = "wishlists.csv"

    # ceiling on the summed quantity of every product in one wishlist
    WISHLIST_MAX_ITEMS: int = Field(20, ge=1)
    # how many times add/remove re-read and re-apply after a version conflict
    WISHLIST_MAX_ATTEMPTS: int = Field(3, ge=1)

    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    # Example .env:
    # DATA_DIR=./data
    # WISHLIST_MAX_ITEMS=50

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()

settings = get_settings()
