"""Agency reference data endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from regfee.backend.src.db import DataStoreError, FeeDataStore, get_fee_store
from regfee.backend.src.schemas.reference import AgencyList
from regfee.backend.src.services import reference_data

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["reference"])


@router.get("/agencies", response_model=AgencyList)
def list_agencies(store: FeeDataStore = Depends(get_fee_store)) -> AgencyList:
    """Return the agencies offered in the fee form."""

    try:
        agencies = reference_data.list_agencies(store)
    except DataStoreError as exc:
        LOGGER.error("agencies_load_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to load agencies.",
        ) from exc
    except Exception as exc:
        LOGGER.exception("agencies_unexpected_error", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected error occurred.",
        ) from exc

    return AgencyList(agencies=agencies)
