"""Pydantic models describing books and aggregation results."""

from __future__ import annotations

from typing import Annotated, Any, List, Optional

from db_core import MongoDocument
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Price = Annotated[float, Field(ge=0, allow_inf_nan=False)]
"""A finite, non-negative price."""

price_adapter: TypeAdapter[float] = TypeAdapter(Price)


class Review(BaseModel):
    """A single reader review embedded in a book document."""

    user: str
    comment: str
    rating: float = Field(ge=0, le=5, allow_inf_nan=False)


class Book(BaseModel):
    """Representation of a book entry stored in MongoDB."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    title: str
    author: str
    genre: List[str] = Field(default_factory=list)
    published_year: int
    publisher: str
    pages: int = Field(gt=0)
    price: Price
    rating: float = Field(ge=0, le=5, allow_inf_nan=False)
    reviews: List[Review] = Field(default_factory=list)
    in_stock: bool = True
    tags: List[str] = Field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        """Dump the fields that get persisted; ``_id`` is left to the store."""
        return self.model_dump(exclude={"id"})


class GenreCount(BaseModel):
    genre: str
    count: int
    average_rating: float


class BookStatistics(BaseModel):
    total_books: int
    average_rating: float
    average_price: float
    average_pages: float
    max_price: float
    min_price: float


class AuthorPopularity(BaseModel):
    author: str
    book_count: int
    average_rating: float
    total_reviews: int


class TopRatedBook(BaseModel):
    """Reduced projection returned by the top-rated query."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    title: str
    author: str
    rating: float
    price: float
    genre: List[str] = Field(default_factory=list)


def with_string_id(doc: MongoDocument) -> dict[str, Any]:
    """Copy a raw document, turning ``_id`` (usually an ObjectId) into a string."""
    payload = dict(doc)
    if payload.get("_id") is not None:
        payload["_id"] = str(payload["_id"])
    return payload
