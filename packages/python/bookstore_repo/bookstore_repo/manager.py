"""Async façade over the bookstore collection.

``BookstoreManager`` owns one Motor client and the ``books`` collection handle.
Callers never build raw query documents: each method composes a filter or an
aggregation pipeline from ``bookstore_repo.query`` and hands it to the store.

    async with BookstoreManager() as manager:
        tolkien = await manager.find_books_by_author("J.R.R. Tolkien")
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from db_core import MongoDocument, MongoSettings, get_db, get_mongo_client, ping
from db_core import settings as default_settings
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING, TEXT
from pymongo.errors import PyMongoError

from .errors import (
    InvalidQueryError,
    StoreConnectionError,
    StoreNotConnectedError,
    StoreOperationError,
)
from .models import (
    AuthorPopularity,
    Book,
    BookStatistics,
    GenreCount,
    Review,
    TopRatedBook,
    price_adapter,
    with_string_id,
)
from .query import (
    And,
    Avg,
    Compare,
    Count,
    Eq,
    Filter,
    Group,
    Limit,
    Match,
    MatchAll,
    Max,
    Min,
    MinSize,
    Or,
    Pattern,
    Project,
    Range,
    Sort,
    Stage,
    SumOfSizes,
    Unwind,
    build_pipeline,
)

IndexSpec = List[Tuple[str, Any]]

BOOK_INDEXES: List[IndexSpec] = [
    [("author", ASCENDING), ("published_year", DESCENDING)],
    [("title", TEXT), ("tags", TEXT)],
    [("price", ASCENDING)],
    [("rating", DESCENDING)],
]

TOP_RATED_MIN_RATING = 4.5

ClientFactory = Callable[[MongoSettings], AsyncIOMotorClient]


@contextmanager
def _store_call(operation: str) -> Iterator[None]:
    """Log and re-raise driver failures as ``StoreOperationError``."""
    try:
        yield
    except PyMongoError as exc:
        logger.exception(f"Error in {operation}: {exc}")
        raise StoreOperationError(operation, str(exc)) from exc


def _top_rated_filter() -> Filter:
    return And(Compare("rating", "gte", TOP_RATED_MIN_RATING), Eq("in_stock", True))


class BookstoreManager:
    def __init__(
        self,
        settings: Optional[MongoSettings] = None,
        client_factory: ClientFactory = get_mongo_client,
    ):
        self.settings = settings or default_settings
        self._client_factory = client_factory
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.books: Optional[AsyncIOMotorCollection] = None

    @classmethod
    def from_client(
        cls, client: AsyncIOMotorClient, settings: Optional[MongoSettings] = None
    ) -> "BookstoreManager":
        """Wrap an already-open client without running the connect diagnostics."""
        manager = cls(settings)
        manager._bind(client)
        return manager

    def _bind(self, client: AsyncIOMotorClient) -> None:
        self.client = client
        self.database = get_db(client, self.settings)
        self.books = self.database[self.settings.collection]

    def _collection(self) -> AsyncIOMotorCollection:
        if self.books is None:
            raise StoreNotConnectedError("BookstoreManager is not connected")
        return self.books

    # ---------------------------------------------------------
    # CONNECTION
    # ---------------------------------------------------------
    async def connect(self) -> bool:
        """Open the client and bind the collection; ``False`` when the store is unreachable."""

        if self.client is not None:
            logger.info(f"Already connected to MongoDB at {self.settings.uri}")
            return True

        client: Optional[AsyncIOMotorClient] = None
        try:
            client = self._client_factory(self.settings)
            await ping(client)
            database_names = await client.list_database_names()
        except PyMongoError as exc:
            logger.error(f"Connection to {self.settings.uri} failed: {exc}")
            if client is not None:
                client.close()
            return False

        self._bind(client)
        logger.info(f"Connected to MongoDB at {self.settings.uri}")
        logger.info(f"Available databases: {database_names}")
        return True

    async def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.database = None
        self.books = None

    async def __aenter__(self) -> "BookstoreManager":
        if not await self.connect():
            raise StoreConnectionError(f"Could not connect to MongoDB at {self.settings.uri}")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    # ---------------------------------------------------------
    # HELPERS
    # ---------------------------------------------------------
    async def _find(self, operation: str, query: Filter) -> List[Book]:
        collection = self._collection()
        with _store_call(operation):
            docs = await collection.find(query.to_mongo()).to_list(length=None)
        return [Book.model_validate(with_string_id(doc)) for doc in docs]

    async def _aggregate(self, operation: str, *stages: Stage) -> List[MongoDocument]:
        collection = self._collection()
        pipeline = build_pipeline(*stages)
        with _store_call(operation):
            return await collection.aggregate(pipeline).to_list(length=None)

    # ---------------------------------------------------------
    # CREATE
    # ---------------------------------------------------------
    async def insert_book(self, book: Union[Book, Mapping[str, Any]]) -> str:
        """Insert one book and return the store-assigned id."""

        if not isinstance(book, Book):
            book = Book.model_validate(book)
        collection = self._collection()
        with _store_call("insert_book"):
            result = await collection.insert_one(book.to_document())
        book_id = str(result.inserted_id)
        logger.info(f"Book inserted with ID: {book_id}")
        return book_id

    async def insert_books(self, books: Sequence[Union[Book, Mapping[str, Any]]]) -> List[str]:
        documents = [
            (book if isinstance(book, Book) else Book.model_validate(book)).to_document()
            for book in books
        ]
        if not documents:
            return []
        collection = self._collection()
        with _store_call("insert_books"):
            result = await collection.insert_many(documents)
        logger.info(f"{len(result.inserted_ids)} books inserted successfully")
        return [str(inserted_id) for inserted_id in result.inserted_ids]

    # ---------------------------------------------------------
    # READ
    # ---------------------------------------------------------
    async def find_all_books(self) -> List[Book]:
        return await self._find("find_all_books", MatchAll())

    async def find_book_by_title(self, title: str) -> Optional[Book]:
        collection = self._collection()
        with _store_call("find_book_by_title"):
            doc = await collection.find_one(Eq("title", title).to_mongo())
        return Book.model_validate(with_string_id(doc)) if doc else None

    async def find_books_by_author(self, author: str) -> List[Book]:
        return await self._find("find_books_by_author", Eq("author", author))

    async def find_books_by_genre(self, genre: str) -> List[Book]:
        return await self._find("find_books_by_genre", Eq("genre", genre))

    async def find_books_by_tag(self, tag: str) -> List[Book]:
        return await self._find("find_books_by_tag", Eq("tags", tag))

    # ---------------------------------------------------------
    # UPDATE
    # ---------------------------------------------------------
    async def update_book_price(self, title: str, new_price: float) -> int:
        """Set the price of the first book titled ``title``; returns the modified count."""

        try:
            new_price = price_adapter.validate_python(new_price)
        except ValidationError as exc:
            raise InvalidQueryError(f"Invalid price {new_price!r}: {exc}") from exc
        collection = self._collection()
        with _store_call("update_book_price"):
            result = await collection.update_one(
                Eq("title", title).to_mongo(),
                {"$set": {"price": new_price}},
            )
        logger.info(f"Modified {result.modified_count} book(s)")
        return result.modified_count

    async def add_book_review(self, title: str, review: Union[Review, Mapping[str, Any]]) -> int:
        """Append ``review`` to the first book titled ``title``."""

        if not isinstance(review, Review):
            review = Review.model_validate(review)
        collection = self._collection()
        with _store_call("add_book_review"):
            result = await collection.update_one(
                Eq("title", title).to_mongo(),
                {"$push": {"reviews": review.model_dump()}},
            )
        logger.info(f"Added review to {result.modified_count} book(s)")
        return result.modified_count

    # ---------------------------------------------------------
    # DELETE
    # ---------------------------------------------------------
    async def delete_book(self, title: str) -> int:
        """Remove every book titled ``title``; returns the deleted count."""

        collection = self._collection()
        with _store_call("delete_book"):
            result = await collection.delete_many(Eq("title", title).to_mongo())
        logger.info(f"Deleted {result.deleted_count} book(s)")
        return result.deleted_count

    async def drop_collection(self) -> None:
        collection = self._collection()
        with _store_call("drop_collection"):
            await collection.drop()
        logger.info(f"Dropped collection {self.settings.db_name}.{self.settings.collection}")

    # ---------------------------------------------------------
    # ADVANCED QUERIES
    # ---------------------------------------------------------
    async def find_books_published_after(self, year: int) -> List[Book]:
        return await self._find(
            "find_books_published_after", Compare("published_year", "gt", year)
        )

    async def find_books_by_price_range(self, min_price: float, max_price: float) -> List[Book]:
        """Inclusive at both ends; inverted bounds return an empty list."""
        return await self._find(
            "find_books_by_price_range", Range("price", min_price, max_price)
        )

    async def find_classic_fantasy_books(self) -> List[Book]:
        return await self._find(
            "find_classic_fantasy_books",
            And(Eq("genre", "Classic"), Eq("genre", "Fantasy")),
        )

    async def find_books_by_rating_or_pages(self, rating: float, pages: int) -> List[Book]:
        return await self._find(
            "find_books_by_rating_or_pages",
            Or(Compare("rating", "gte", rating), Compare("pages", "lte", pages)),
        )

    async def find_books_with_multiple_genres(self, genre_count: int) -> List[Book]:
        return await self._find(
            "find_books_with_multiple_genres", MinSize("genre", genre_count)
        )

    async def find_books_by_title_pattern(self, pattern: str) -> List[Book]:
        """Case-insensitive regex match on the title."""
        return await self._find("find_books_by_title_pattern", Pattern("title", pattern))

    # ---------------------------------------------------------
    # AGGREGATIONS
    # ---------------------------------------------------------
    async def get_books_count_by_genre(self) -> List[GenreCount]:
        rows = await self._aggregate(
            "get_books_count_by_genre",
            Unwind("genre"),
            Group("genre", {"count": Count(), "average_rating": Avg("rating")}),
            Sort(("count", -1)),
        )
        return [
            GenreCount(genre=row["_id"], count=row["count"], average_rating=row["average_rating"])
            for row in rows
        ]

    async def get_book_statistics(self) -> Optional[BookStatistics]:
        """Collection-wide statistics; ``None`` when there are no books."""

        rows = await self._aggregate(
            "get_book_statistics",
            Group(
                None,
                {
                    "total_books": Count(),
                    "average_rating": Avg("rating"),
                    "average_price": Avg("price"),
                    "average_pages": Avg("pages"),
                    "max_price": Max("price"),
                    "min_price": Min("price"),
                },
            ),
        )
        if not rows or not rows[0].get("total_books"):
            return None
        row = dict(rows[0])
        row.pop("_id", None)
        return BookStatistics.model_validate(row)

    async def get_popular_authors(self, limit: int = 5) -> List[AuthorPopularity]:
        """Authors ranked by average rating, then by number of books."""

        rows = await self._aggregate(
            "get_popular_authors",
            Group(
                "author",
                {
                    "book_count": Count(),
                    "average_rating": Avg("rating"),
                    "total_reviews": SumOfSizes("reviews"),
                },
            ),
            Sort(("average_rating", -1), ("book_count", -1)),
            Limit(limit),
        )
        return [
            AuthorPopularity(
                author=row["_id"],
                book_count=row["book_count"],
                average_rating=row["average_rating"],
                total_reviews=row["total_reviews"],
            )
            for row in rows
        ]

    async def get_top_rated_in_stock_books(self, limit: int = 5) -> List[TopRatedBook]:
        rows = await self._aggregate(
            "get_top_rated_in_stock_books",
            Match(_top_rated_filter()),
            Sort(("rating", -1)),
            Limit(limit),
            Project("title", "author", "rating", "price", "genre"),
        )
        return [TopRatedBook.model_validate(with_string_id(row)) for row in rows]

    # ---------------------------------------------------------
    # INDEXES
    # ---------------------------------------------------------
    async def create_indexes(self, indexes: Optional[Sequence[IndexSpec]] = None) -> List[str]:
        """Create ``indexes`` (the query-supporting set by default); returns index names."""

        collection = self._collection()
        names: List[str] = []
        with _store_call("create_indexes"):
            for keys in indexes if indexes is not None else BOOK_INDEXES:
                names.append(await collection.create_index(keys))
        logger.info(f"Indexes created successfully: {names}")
        return names

    async def explain_query(self) -> dict:
        """Return the execution plan of the top-rated, in-stock filter."""

        collection = self._collection()
        with _store_call("explain_query"):
            explanation = await collection.find(_top_rated_filter().to_mongo()).explain()
        winning_plan = explanation.get("queryPlanner", {}).get("winningPlan")
        logger.info(f"Query explanation: {winning_plan}")
        return explanation
