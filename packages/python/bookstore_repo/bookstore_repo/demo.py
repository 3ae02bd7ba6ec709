"""Walk through every BookstoreManager operation against a live store."""

from __future__ import annotations

import asyncio

from loguru import logger

from .errors import BookstoreError
from .manager import BookstoreManager
from .models import Book, Review

DEMO_BOOK = Book(
    title="The Alchemist",
    author="Paulo Coelho",
    genre=["Fiction", "Adventure", "Fantasy"],
    published_year=1988,
    publisher="HarperCollins",
    pages=208,
    price=13.99,
    rating=4.7,
    reviews=[Review(user="reader18", comment="Inspiring journey", rating=5)],
    in_stock=True,
    tags=["quest", "personal legend", "spiritual"],
)


async def run_demo(manager: BookstoreManager) -> None:
    logger.info("=== CRUD operations ===")
    await manager.insert_book(DEMO_BOOK)

    tolkien_books = await manager.find_books_by_author("J.R.R. Tolkien")
    logger.info(f"Found {len(tolkien_books)} books by J.R.R. Tolkien")

    await manager.update_book_price("The Great Gatsby", 13.50)
    await manager.add_book_review(
        "1984", Review(user="new_reader", comment="Still relevant today", rating=5)
    )

    logger.info("=== Advanced queries ===")
    recent = await manager.find_books_published_after(1950)
    logger.info(f"Found {len(recent)} books published after 1950")

    affordable = await manager.find_books_by_price_range(10, 15)
    logger.info(f"Found {len(affordable)} books between $10 and $15")

    matching = await manager.find_books_by_title_pattern("the")
    logger.info(f'Found {len(matching)} books with "the" in title')

    logger.info("=== Aggregation pipeline ===")
    for row in await manager.get_books_count_by_genre():
        logger.info(f"  {row.genre}: {row.count} books, avg rating {row.average_rating:.2f}")

    stats = await manager.get_book_statistics()
    logger.info(f"Overall statistics: {stats}")

    for author in await manager.get_popular_authors(3):
        logger.info(f"  {author.author}: {author.average_rating:.2f} over {author.book_count} book(s)")

    logger.info("=== Indexing ===")
    await manager.create_indexes()
    await manager.explain_query()


async def main() -> int:
    try:
        async with BookstoreManager() as manager:
            await run_demo(manager)
    except BookstoreError as exc:
        logger.error(f"Demo failed: {exc}")
        return 1
    return 0


def run() -> int:
    return asyncio.run(main())
