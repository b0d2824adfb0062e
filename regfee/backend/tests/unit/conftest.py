"""Shared fixtures: an in-memory reference data store wired into the app."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from regfee.backend.src.db import SqlFeeDataStore, get_fee_store
from regfee.backend.src.main import app

SCHEMA = [
    "CREATE TABLE tbl_agencies (agency_id TEXT, name TEXT, currency TEXT)",
    "CREATE TABLE tbl_procedure_types (procedure_id INTEGER, name TEXT, display_name TEXT)",
    "CREATE TABLE tbl_fee_components (component_id INTEGER, component_name TEXT)",
    """
    CREATE TABLE tbl_fee_rules (
        id INTEGER PRIMARY KEY,
        agency_id TEXT,
        procedure_id INTEGER,
        role TEXT,
        component_id INTEGER,
        amount NUMERIC,
        included_quantity NUMERIC,
        component_name TEXT
    )
    """,
]

AGENCIES = [
    {"agency_id": "A1", "name": "Alpha Agency", "currency": "USD"},
    {"agency_id": "B2", "name": "beta agency", "currency": "EUR"},
    {"agency_id": "Z9", "name": "Zeta Agency", "currency": None},
    {"agency_id": "C3", "name": None, "currency": None},
]

PROCEDURES = [
    {"procedure_id": 7, "name": "new_application", "display_name": "New Application"},
    {"procedure_id": 8, "name": "renewal", "display_name": None},
    {"procedure_id": 9, "name": None, "display_name": ""},
]

COMPONENTS = [
    {"component_id": 1, "component_name": "Base Fee"},
    {"component_id": 2, "component_name": "Strengths"},
    {"component_id": 3, "component_name": "Translation"},
    {"component_id": 4, "component_name": "Presentations"},
]

FEE_RULES = [
    ("A1", 7, "National", 1, 500, 0, None),
    ("A1", 7, "National", 2, 50, 1, None),
    ("A1", 7, "National", 4, 25, 0, None),
    ("A1", 7, "National", 3, 0, 0, None),
    ("A1", 7, "CMS", 1, 300, 0, None),
    ("A1", 7, "CMS", 2, 40, 0, "Extra Strength"),
    ("B2", 7, "National", 1, 1000, 0, None),
    ("Z9", 7, "National", 1, 100, 0, None),
]


def _seed(engine: Engine) -> None:
    with engine.begin() as connection:
        for statement in SCHEMA:
            connection.execute(text(statement))
        connection.execute(
            text(
                "INSERT INTO tbl_agencies (agency_id, name, currency) "
                "VALUES (:agency_id, :name, :currency)"
            ),
            AGENCIES,
        )
        connection.execute(
            text(
                "INSERT INTO tbl_procedure_types (procedure_id, name, display_name) "
                "VALUES (:procedure_id, :name, :display_name)"
            ),
            PROCEDURES,
        )
        connection.execute(
            text(
                "INSERT INTO tbl_fee_components (component_id, component_name) "
                "VALUES (:component_id, :component_name)"
            ),
            COMPONENTS,
        )
        connection.execute(
            text(
                "INSERT INTO tbl_fee_rules "
                "(agency_id, procedure_id, role, component_id, amount, "
                "included_quantity, component_name) "
                "VALUES (:agency_id, :procedure_id, :role, :component_id, :amount, "
                ":included_quantity, :component_name)"
            ),
            [
                {
                    "agency_id": agency_id,
                    "procedure_id": procedure_id,
                    "role": role,
                    "component_id": component_id,
                    "amount": amount,
                    "included_quantity": included_quantity,
                    "component_name": component_name,
                }
                for (
                    agency_id,
                    procedure_id,
                    role,
                    component_id,
                    amount,
                    included_quantity,
                    component_name,
                ) in FEE_RULES
            ],
        )


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    _seed(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def fee_store(sqlite_engine: Engine) -> SqlFeeDataStore:
    return SqlFeeDataStore(lambda: sqlite_engine)


@pytest.fixture()
def client(fee_store: SqlFeeDataStore) -> Iterator[TestClient]:
    app.dependency_overrides[get_fee_store] = lambda: fee_store
    yield TestClient(app)
    app.dependency_overrides.pop(get_fee_store, None)
