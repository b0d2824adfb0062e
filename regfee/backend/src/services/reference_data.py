"""Agency and procedure listings for the fee form."""

from __future__ import annotations

from regfee.backend.src.db import FeeDataStore
from regfee.backend.src.schemas.reference import AgencyOption, ProcedureOption
from regfee.backend.src.services.records import (
    AGENCY_TABLE,
    PROCEDURE_TABLE,
    normalize_agency,
    normalize_procedure,
)

AGENCY_ORDER_COLUMN = "name"
PROCEDURE_ORDER_COLUMN = "display_name"


def list_agencies(store: FeeDataStore) -> list[AgencyOption]:
    """Return every agency, ordered by the store on its display name."""

    rows = store.query(AGENCY_TABLE, order_by=AGENCY_ORDER_COLUMN)
    return [normalize_agency(row) for row in rows]


def list_procedures(store: FeeDataStore) -> list[ProcedureOption]:
    """Return every procedure type, ordered by the store on its display name."""

    rows = store.query(PROCEDURE_TABLE, order_by=PROCEDURE_ORDER_COLUMN)
    return [normalize_procedure(row) for row in rows]
