#!/usr/bin/env python3
"""
Reset the bookstore collection to the sample catalogue.

Drops the collection, inserts the ten sample books and creates the
title/author/genre/published_year indexes. Connection settings come from
MONGO_URI / MONGO_DB_NAME / MONGO_COLLECTION (see db_core.settings).
"""

from bookstore_repo.seed import run


if __name__ == "__main__":
    raise SystemExit(run())
