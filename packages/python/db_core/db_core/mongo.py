"""Async MongoDB helpers built on top of Motor.

Only generic utilities live here; the bookstore repository builds its
collection handles and queries on top."""

from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .settings import MongoSettings, settings as default_settings


def get_mongo_client(settings: Optional[MongoSettings] = None) -> AsyncIOMotorClient:
    """Return a new Motor client for ``settings`` (module defaults if omitted)."""

    settings = settings or default_settings
    return AsyncIOMotorClient(settings.uri, serverSelectionTimeoutMS=settings.timeout_ms)


def get_db(
    client: AsyncIOMotorClient, settings: Optional[MongoSettings] = None
) -> AsyncIOMotorDatabase:
    """Return the database named by ``settings.db_name`` on ``client``."""

    settings = settings or default_settings
    return client[settings.db_name]


async def ping(client: AsyncIOMotorClient) -> dict[str, Any]:
    """Run a simple ``ping`` command against the server behind ``client``."""

    await client.admin.command("ping")
    return {"ok": True}
