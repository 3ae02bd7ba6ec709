"""Named pass/fail checks of the bookstore façade against a live store.

Each check inserts, queries or aggregates through ``BookstoreManager`` and
records whether the result looked right. The report is printed as PASS/FAIL
lines followed by a score.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List

from loguru import logger

from .errors import BookstoreError
from .manager import BookstoreManager
from .models import Book

CHECK_BOOK = Book(
    title="Test Book",
    author="Test Author",
    genre=["Test", "Fiction"],
    published_year=2023,
    publisher="Test Publisher",
    pages=100,
    price=9.99,
    rating=4.0,
    reviews=[],
    in_stock=True,
    tags=["test"],
)


class CheckFailed(AssertionError):
    """Raised by a check whose result does not look right."""


@dataclass
class CheckResult:
    name: str
    passed: bool
    message: str = ""


@dataclass
class CheckReport:
    results: List[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for result in self.results if result.passed)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def score(self) -> float:
        return 100.0 * self.passed / self.total if self.total else 0.0

    @property
    def all_passed(self) -> bool:
        return self.total > 0 and self.passed == self.total


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise CheckFailed(message)


async def _check(report: CheckReport, name: str, body: Callable[[], Awaitable[None]]) -> None:
    try:
        await body()
    except Exception as exc:
        report.results.append(CheckResult(name, False, str(exc)))
        logger.warning(f"FAIL: {name} ({exc})")
        return
    report.results.append(CheckResult(name, True))
    logger.info(f"PASS: {name}")


async def run_checks(manager: BookstoreManager) -> CheckReport:
    """Run every check in order; ``manager`` must already be connected."""

    report = CheckReport()

    async def connection() -> None:
        _require(manager.client is not None, "Client not connected")
        _require(manager.database is not None, "Database not initialized")

    async def insert() -> None:
        book_id = await manager.insert_book(CHECK_BOOK)
        _require(bool(book_id), "Book not inserted")

    async def find_all() -> None:
        _require(len(await manager.find_all_books()) > 0, "No books found")

    async def find_by_author() -> None:
        books = await manager.find_books_by_author(CHECK_BOOK.author)
        _require(len(books) > 0, "No books found by author")

    async def update_price() -> None:
        await manager.update_book_price(CHECK_BOOK.title, 12.99)
        books = await manager.find_books_by_author(CHECK_BOOK.author)
        _require(bool(books) and books[0].price == 12.99, "Price not updated")

    async def delete() -> None:
        await manager.delete_book(CHECK_BOOK.title)
        remaining = await manager.find_books_by_author(CHECK_BOOK.author)
        _require(not remaining, "Book not deleted")

    async def price_range() -> None:
        books = await manager.find_books_by_price_range(10, 20)
        _require(all(10 <= book.price <= 20 for book in books), "Book outside price range")

    async def genre() -> None:
        _require(len(await manager.find_books_by_genre("Fantasy")) > 0, "No fantasy books found")

    async def title_pattern() -> None:
        books = await manager.find_books_by_title_pattern("Harry")
        _require(len(books) > 0, "No books matching pattern")

    async def genre_aggregation() -> None:
        _require(len(await manager.get_books_count_by_genre()) > 0, "No genre statistics")

    async def statistics() -> None:
        stats = await manager.get_book_statistics()
        _require(stats is not None, "No statistics returned")

    async def popular_authors() -> None:
        authors = await manager.get_popular_authors(3)
        _require(len(authors) > 0, "No authors returned")
        _require(len(authors) <= 3, "Limit not working")

    async def explanation() -> None:
        await manager.create_indexes()
        plan = await manager.explain_query()
        _require("queryPlanner" in plan, "No query plan returned")

    checks = [
        ("Database connection", connection),
        ("Insert book", insert),
        ("Find all books", find_all),
        ("Find books by author", find_by_author),
        ("Update book price", update_price),
        ("Delete book", delete),
        ("Price range query", price_range),
        ("Genre query", genre),
        ("Title pattern query", title_pattern),
        ("Genre aggregation", genre_aggregation),
        ("Book statistics aggregation", statistics),
        ("Popular authors aggregation", popular_authors),
        ("Query explanation", explanation),
    ]
    for name, body in checks:
        await _check(report, name, body)

    logger.info(f"Passed: {report.passed}/{report.total}")
    logger.info(f"Score: {report.score:.1f}%")
    return report


async def main() -> int:
    try:
        async with BookstoreManager() as manager:
            report = await run_checks(manager)
    except BookstoreError as exc:
        logger.error(f"Check suite failed: {exc}")
        return 1
    return 0 if report.all_passed else 1


def run() -> int:
    return asyncio.run(main())
