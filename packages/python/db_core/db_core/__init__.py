"""Minimal MongoDB helpers shared across domain repositories.

Example usage in a domain repository:

    from db_core import get_db, get_mongo_client

    async def list_books():
        db = get_db(get_mongo_client())
        cursor = db["books"].find({"in_stock": True}).sort("rating", -1)
        return await cursor.to_list(length=100)
"""

from .settings import MongoSettings, settings
from .mongo import get_mongo_client, get_db, ping
from .typing import MongoDocument, Pipeline

__all__ = [
    "MongoSettings",
    "settings",
    "get_mongo_client",
    "get_db",
    "ping",
    "MongoDocument",
    "Pipeline",
]
