#!/usr/bin/env python3
"""
Run the PASS/FAIL checks of the bookstore façade against the configured store
and print a score. Exits non-zero unless every check passes.
"""

from bookstore_repo.checks import run


if __name__ == "__main__":
    raise SystemExit(run())
