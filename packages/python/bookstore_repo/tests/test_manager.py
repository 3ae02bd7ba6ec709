import math
from statistics import mean

import pytest
from pydantic import ValidationError
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from bookstore_repo import (
    BOOK_INDEXES,
    Book,
    BookstoreManager,
    InvalidQueryError,
    Review,
    StoreConnectionError,
    StoreNotConnectedError,
    StoreOperationError,
)
from bookstore_repo.sample_data import SAMPLE_BOOKS


def _titles(books):
    return {book.title for book in books}


def _new_book(**overrides):
    data = dict(
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
    data.update(overrides)
    return Book(**data)


# ---------------------------------------------------------
# Connection lifecycle
# ---------------------------------------------------------


async def test_connect_binds_collection_and_pings(test_settings, stub_client_cls):
    client = stub_client_cls()
    manager = BookstoreManager(test_settings, client_factory=lambda settings: client)

    assert await manager.connect() is True
    assert manager.client is client
    assert manager.books is client.collection
    assert client.admin.commands == ["ping"]
    assert client.listed_databases == 1


async def test_connect_failure_returns_false_and_leaves_handles_unset(test_settings, stub_client_cls):
    client = stub_client_cls(error=ServerSelectionTimeoutError("no servers"))
    manager = BookstoreManager(test_settings, client_factory=lambda settings: client)

    assert await manager.connect() is False
    assert manager.client is None
    assert manager.books is None
    assert client.closed


async def test_connect_twice_keeps_a_single_client(test_settings, stub_client_cls):
    clients = [stub_client_cls(), stub_client_cls()]
    created = []

    def factory(settings):
        created.append(clients[len(created)])
        return created[-1]

    manager = BookstoreManager(test_settings, client_factory=factory)

    assert await manager.connect() is True
    assert await manager.connect() is True
    await manager.disconnect()

    assert created == [clients[0]]
    assert clients[0].closed


async def test_disconnect_closes_client_and_clears_handles(test_settings, stub_client_cls):
    client = stub_client_cls()
    manager = BookstoreManager(test_settings, client_factory=lambda settings: client)
    await manager.connect()

    await manager.disconnect()

    assert client.closed
    assert manager.client is None and manager.database is None and manager.books is None


async def test_scoped_manager_disconnects_when_body_raises(test_settings, stub_client_cls):
    client = stub_client_cls()
    manager = BookstoreManager(test_settings, client_factory=lambda settings: client)

    with pytest.raises(RuntimeError):
        async with manager:
            assert manager.books is not None
            raise RuntimeError("boom")

    assert client.closed
    assert manager.books is None


async def test_scoped_manager_raises_when_store_unreachable(test_settings, stub_client_cls):
    client = stub_client_cls(error=ServerSelectionTimeoutError("no servers"))
    manager = BookstoreManager(test_settings, client_factory=lambda settings: client)

    with pytest.raises(StoreConnectionError):
        async with manager:
            pass


async def test_operations_require_a_connection(test_settings):
    manager = BookstoreManager(test_settings)

    with pytest.raises(StoreNotConnectedError):
        await manager.find_all_books()


# ---------------------------------------------------------
# CRUD
# ---------------------------------------------------------


async def test_insert_then_find_by_title_returns_identical_record(manager):
    book = _new_book()

    book_id = await manager.insert_book(book)
    found = await manager.find_books_by_title_pattern("^The Alchemist$")
    assert (await manager.find_book_by_title("The Alchemist")).id == book_id

    assert len(found) == 1
    assert found[0].id == book_id
    assert found[0].model_dump(exclude={"id"}) == book.model_dump(exclude={"id"})


async def test_insert_accepts_plain_mappings(manager):
    await manager.insert_book(SAMPLE_BOOKS[0])

    assert (await manager.find_book_by_title("The Great Gatsby")).author == "F. Scott Fitzgerald"


async def test_insert_rejects_out_of_bounds_fields(manager):
    with pytest.raises(ValidationError):
        await manager.insert_book({**SAMPLE_BOOKS[0], "rating": 6})
    with pytest.raises(ValidationError):
        await manager.insert_book({**SAMPLE_BOOKS[0], "price": -1})
    with pytest.raises(ValidationError):
        await manager.insert_book({**SAMPLE_BOOKS[0], "pages": 0})


async def test_find_all_books(seeded):
    books = await seeded.find_all_books()

    assert len(books) == len(SAMPLE_BOOKS)
    assert all(book.id for book in books)


async def test_update_price_changes_only_the_price(seeded):
    before = await seeded.find_book_by_title("The Great Gatsby")

    assert await seeded.update_book_price("The Great Gatsby", 13.50) == 1

    after = await seeded.find_book_by_title("The Great Gatsby")
    assert after.price == 13.50
    assert after.model_dump(exclude={"price"}) == before.model_dump(exclude={"price"})


async def test_update_price_for_missing_title_modifies_nothing(seeded):
    assert await seeded.update_book_price("No Such Book", 1.0) == 0


@pytest.mark.parametrize("price", [-1, math.nan, math.inf, "cheap"])
async def test_update_price_rejects_invalid_prices(seeded, price):
    with pytest.raises(InvalidQueryError):
        await seeded.update_book_price("The Great Gatsby", price)

    assert (await seeded.find_book_by_title("The Great Gatsby")).price == 12.99
    assert len(await seeded.find_all_books()) == len(SAMPLE_BOOKS)


async def test_insert_rejects_non_finite_price(manager):
    with pytest.raises(ValidationError):
        await manager.insert_book({**SAMPLE_BOOKS[0], "price": math.nan})


async def test_add_review_appends_and_keeps_order(seeded):
    before = await seeded.find_book_by_title("1984")
    review = {"user": "new_reader", "comment": "Still relevant today", "rating": 5}

    assert await seeded.add_book_review("1984", review) == 1

    after = await seeded.find_book_by_title("1984")
    assert len(after.reviews) == len(before.reviews) + 1
    assert after.reviews[:-1] == before.reviews
    assert after.reviews[-1] == Review(**review)


async def test_delete_removes_every_record_with_the_title(seeded):
    await seeded.insert_book(SAMPLE_BOOKS[2])

    assert await seeded.delete_book("1984") == 2
    assert await seeded.find_book_by_title("1984") is None
    assert len(await seeded.find_all_books()) == len(SAMPLE_BOOKS) - 1


# ---------------------------------------------------------
# Queries
# ---------------------------------------------------------


async def test_find_by_author_genre_and_tag(seeded):
    assert _titles(await seeded.find_books_by_author("J.R.R. Tolkien")) == {
        "The Hobbit",
        "The Lord of the Rings",
    }
    assert _titles(await seeded.find_books_by_genre("Fantasy")) == {
        "The Hobbit",
        "The Lord of the Rings",
        "Harry Potter and the Philosopher's Stone",
    }
    assert _titles(await seeded.find_books_by_tag("middle-earth")) == {
        "The Hobbit",
        "The Lord of the Rings",
    }


async def test_published_after_is_strict(seeded):
    books = await seeded.find_books_published_after(1951)

    assert _titles(books) == {
        "To Kill a Mockingbird",
        "Harry Potter and the Philosopher's Stone",
        "The Lord of the Rings",
    }


async def test_price_range_is_inclusive_at_both_bounds(seeded):
    books = await seeded.find_books_by_price_range(9.99, 11.99)

    assert _titles(books) == {"Pride and Prejudice", "The Catcher in the Rye", "1984"}


async def test_inverted_price_range_is_empty(seeded):
    assert await seeded.find_books_by_price_range(20, 10) == []


async def test_classic_fantasy_needs_both_genres(seeded):
    assert await seeded.find_classic_fantasy_books() == []

    await seeded.insert_book(_new_book(title="The Odyssey", genre=["Classic", "Fantasy"]))

    assert _titles(await seeded.find_classic_fantasy_books()) == {"The Odyssey"}


async def test_rating_or_pages(seeded):
    books = await seeded.find_books_by_rating_or_pages(4.9, 220)

    assert _titles(books) == {
        "The Hobbit",
        "Harry Potter and the Philosopher's Stone",
        "The Lord of the Rings",
        "The Great Gatsby",
    }


async def test_multiple_genres(seeded):
    books = await seeded.find_books_with_multiple_genres(3)

    assert _titles(books) == {
        "To Kill a Mockingbird",
        "1984",
        "Pride and Prejudice",
        "Brave New World",
        "Moby Dick",
    }


async def test_title_pattern_ignores_case(seeded):
    books = await seeded.find_books_by_title_pattern("the")

    assert _titles(books) == {
        "The Great Gatsby",
        "The Hobbit",
        "Harry Potter and the Philosopher's Stone",
        "The Catcher in the Rye",
        "The Lord of the Rings",
    }


@pytest.mark.parametrize("pattern", [r"\p{Lu}he", r"(?<w>The)", r"^(?i)the"])
async def test_title_pattern_passes_pcre_syntax_to_the_store(stub_manager, recording, pattern):
    await stub_manager.find_books_by_title_pattern(pattern)

    assert recording.queries == [{"title": {"$regex": pattern, "$options": "i"}}]


async def test_title_pattern_rejected_by_the_store_surfaces_as_operation_error(failing_manager):
    with pytest.raises(StoreOperationError) as excinfo:
        await failing_manager.find_books_by_title_pattern("[unclosed")

    assert excinfo.value.operation == "find_books_by_title_pattern"


async def test_store_errors_surface_as_operation_errors(failing_manager):
    with pytest.raises(StoreOperationError) as excinfo:
        await failing_manager.find_books_by_author("Anyone")

    assert excinfo.value.operation == "find_books_by_author"
    assert isinstance(excinfo.value.__cause__, OperationFailure)


# ---------------------------------------------------------
# Aggregations
# ---------------------------------------------------------


async def test_books_count_by_genre(seeded):
    rows = await seeded.get_books_count_by_genre()

    counts = [row.count for row in rows]
    assert counts == sorted(counts, reverse=True)
    assert sum(counts) >= len(SAMPLE_BOOKS)
    assert rows[0].genre == "Fiction" and rows[0].count == 7
    for row in rows:
        expected = mean(book["rating"] for book in SAMPLE_BOOKS if row.genre in book["genre"])
        assert row.average_rating == pytest.approx(expected)


async def test_book_statistics(seeded):
    stats = await seeded.get_book_statistics()

    assert stats.total_books == len(SAMPLE_BOOKS)
    assert stats.min_price == pytest.approx(9.99)
    assert stats.max_price == pytest.approx(29.99)
    assert stats.average_price == pytest.approx(mean(book["price"] for book in SAMPLE_BOOKS))
    assert stats.average_pages == pytest.approx(mean(book["pages"] for book in SAMPLE_BOOKS))
    assert stats.average_rating == pytest.approx(mean(book["rating"] for book in SAMPLE_BOOKS))


async def test_book_statistics_on_empty_collection(manager):
    assert await manager.get_book_statistics() is None


async def test_book_statistics_ignores_null_row_for_empty_group(test_settings, stub_client_cls, recording_cls):
    empty_row = {
        "_id": None,
        "total_books": 0,
        "average_rating": None,
        "average_price": None,
        "average_pages": None,
        "max_price": None,
        "min_price": None,
    }
    collection = recording_cls(rows=[empty_row])
    manager = BookstoreManager.from_client(stub_client_cls(collection=collection), test_settings)

    assert await manager.get_book_statistics() is None


async def test_popular_authors_respects_limit_and_order(seeded):
    authors = await seeded.get_popular_authors(3)

    assert [row.author for row in authors] == ["J.R.R. Tolkien", "J.K. Rowling", "Harper Lee"]
    assert authors[0].book_count == 2
    assert authors[0].total_reviews == 4
    ratings = [row.average_rating for row in authors]
    assert ratings == sorted(ratings, reverse=True)


async def test_popular_authors_breaks_rating_ties_by_book_count(manager):
    await manager.insert_book(_new_book(title="Solo", author="One Book Author", rating=4.0))
    await manager.insert_book(_new_book(title="First", author="Two Book Author", rating=4.0))
    await manager.insert_book(_new_book(title="Second", author="Two Book Author", rating=4.0))

    authors = await manager.get_popular_authors(2)

    assert [row.author for row in authors] == ["Two Book Author", "One Book Author"]
    assert [row.book_count for row in authors] == [2, 1]
    assert authors[0].average_rating == authors[1].average_rating


async def test_popular_authors_rejects_non_positive_limit(seeded):
    with pytest.raises(InvalidQueryError):
        await seeded.get_popular_authors(0)


async def test_top_rated_in_stock_books(seeded):
    books = await seeded.get_top_rated_in_stock_books()

    assert len(books) == 5
    assert books[0].title == "The Lord of the Rings"
    assert "1984" not in {book.title for book in books}
    ratings = [book.rating for book in books]
    assert ratings == sorted(ratings, reverse=True)
    assert min(ratings) >= 4.5


# ---------------------------------------------------------
# Indexes
# ---------------------------------------------------------


async def test_create_indexes_uses_query_supporting_set(stub_manager, recording):
    names = await stub_manager.create_indexes()

    assert recording.indexes == BOOK_INDEXES
    assert names[0] == "author_1_published_year_-1"
    assert len(names) == 4


async def test_explain_query_uses_top_rated_filter(stub_manager, recording):
    explanation = await stub_manager.explain_query()

    assert explanation["queryPlanner"]["winningPlan"] == {"stage": "FETCH"}
    assert recording.queries == [{"$and": [{"rating": {"$gte": 4.5}}, {"in_stock": True}]}]


# ---------------------------------------------------------
# End to end
# ---------------------------------------------------------


async def test_sample_catalogue_scenario(seeded):
    assert _titles(await seeded.find_books_by_author("J.R.R. Tolkien")) == {
        "The Hobbit",
        "The Lord of the Rings",
    }

    await seeded.update_book_price("The Great Gatsby", 13.50)
    assert (await seeded.find_book_by_title("The Great Gatsby")).price == 13.50

    await seeded.delete_book("1984")
    assert len(await seeded.find_all_books()) == 9
