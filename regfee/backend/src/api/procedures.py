"""Procedure type reference data endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from regfee.backend.src.db import DataStoreError, FeeDataStore, get_fee_store
from regfee.backend.src.schemas.reference import ProcedureList
from regfee.backend.src.services import reference_data

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["reference"])


@router.get("/procedures", response_model=ProcedureList)
def list_procedures(store: FeeDataStore = Depends(get_fee_store)) -> ProcedureList:
    """Return the procedure types offered in the fee form."""

    try:
        procedures = reference_data.list_procedures(store)
    except DataStoreError as exc:
        LOGGER.error("procedures_load_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to load procedures.",
        ) from exc
    except Exception as exc:
        LOGGER.exception("procedures_unexpected_error", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected error occurred.",
        ) from exc

    return ProcedureList(procedures=procedures)
