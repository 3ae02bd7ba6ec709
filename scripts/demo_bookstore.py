#!/usr/bin/env python3
"""
Run every BookstoreManager operation once against the configured store.

Seed first with scripts/insert_books.py.
"""

from bookstore_repo.demo import run


if __name__ == "__main__":
    raise SystemExit(run())
