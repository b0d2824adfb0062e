"""Data store access for the fee reference tables."""

from __future__ import annotations

from .session import DataStoreError, build_database_url, get_engine
from .store import FeeDataStore, Row, SqlFeeDataStore, get_fee_store

__all__ = [
    "DataStoreError",
    "FeeDataStore",
    "Row",
    "SqlFeeDataStore",
    "build_database_url",
    "get_engine",
    "get_fee_store",
]
