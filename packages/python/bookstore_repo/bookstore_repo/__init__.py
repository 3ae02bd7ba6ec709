"""Bookstore repository: typed access to the books collection in MongoDB."""

from .errors import (
    BookstoreError,
    InvalidQueryError,
    StoreConnectionError,
    StoreNotConnectedError,
    StoreOperationError,
)
from .manager import BOOK_INDEXES, BookstoreManager
from .models import (
    AuthorPopularity,
    Book,
    BookStatistics,
    GenreCount,
    Review,
    TopRatedBook,
)
from .seed import seed_sample_data

__all__ = [
    "BookstoreError",
    "InvalidQueryError",
    "StoreConnectionError",
    "StoreNotConnectedError",
    "StoreOperationError",
    "BOOK_INDEXES",
    "BookstoreManager",
    "AuthorPopularity",
    "Book",
    "BookStatistics",
    "GenreCount",
    "Review",
    "TopRatedBook",
    "seed_sample_data",
]
