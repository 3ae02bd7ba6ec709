"""Reset the bookstore collection to the sample catalogue."""

from __future__ import annotations

import asyncio

from loguru import logger
from pymongo import ASCENDING, DESCENDING

from .errors import BookstoreError
from .manager import BookstoreManager
from .sample_data import sample_books

SEED_INDEXES = [
    [("title", ASCENDING)],
    [("author", ASCENDING)],
    [("genre", ASCENDING)],
    [("published_year", DESCENDING)],
]


async def seed_sample_data(manager: BookstoreManager) -> int:
    """Drop the collection, insert the sample books and create the lookup indexes."""

    await manager.drop_collection()
    inserted = await manager.insert_books(sample_books())
    await manager.create_indexes(SEED_INDEXES)
    return len(inserted)


async def main() -> int:
    try:
        async with BookstoreManager() as manager:
            count = await seed_sample_data(manager)
    except BookstoreError as exc:
        logger.error(f"Error inserting data: {exc}")
        return 1
    logger.info(f"Seeded {count} books")
    return 0


def run() -> int:
    return asyncio.run(main())
