"""Configuration helpers for MongoDB connections used by db_core.

Applications can create a new ``MongoSettings`` instance at startup and pass it
to ``get_mongo_client`` / ``BookstoreManager`` to override the defaults. If not
overridden, values come from the environment (a ``.env`` file is honoured).
"""
import os

from dotenv import find_dotenv, load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

# Search for the nearest .env so running from subdirectories still loads root config.
load_dotenv(find_dotenv(usecwd=True))


class MongoSettings(BaseModel):
    """MongoDB connection target for the bookstore collection."""

    uri: str = Field(
        default_factory=lambda: os.getenv("MONGO_URI", "mongodb://localhost:27017")
    )
    db_name: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "bookstore"))
    collection: str = Field(
        default_factory=lambda: os.getenv("MONGO_COLLECTION", "books")
    )
    timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_TIMEOUT_MS", "5000")), gt=0
    )


def _default_settings() -> "MongoSettings":
    """Provide a factory to keep settings override logic simple in the future."""

    return MongoSettings()


settings: MongoSettings = _default_settings()
logger.info(f"MongoSettings initialized with uri={settings.uri} db_name={settings.db_name}")
