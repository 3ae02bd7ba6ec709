"""Lightweight typing helpers shared by Mongo-backed repositories."""

from typing import Any, Mapping

MongoDocument = Mapping[str, Any]
"""A raw document as returned by the driver."""

Pipeline = list[dict[str, Any]]
"""An aggregation pipeline ready to hand to ``collection.aggregate``."""
