"""Fee calculation endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from regfee.backend.src.db import DataStoreError, FeeDataStore, get_fee_store
from regfee.backend.src.schemas.fee import FeeCalculationResult
from regfee.backend.src.services import fee_engine
from regfee.backend.src.services.fee_engine import FeeRequestError

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["fees"])


@router.post("/calculate-fee", response_model=FeeCalculationResult)
def calculate_fee(
    request: dict, store: FeeDataStore = Depends(get_fee_store)
) -> FeeCalculationResult:
    """Calculate the fee for an agency, procedure and role."""

    try:
        fee_request = fee_engine.parse_fee_request(request)
    except FeeRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    try:
        return fee_engine.calculate_fee(store, fee_request)
    except DataStoreError as exc:
        LOGGER.error(
            "fee_rules_query_failed",
            agency_id=fee_request.agency_id,
            procedure_id=fee_request.procedure_id,
            role=fee_request.role,
            error=str(exc),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch fee rules at this time.",
        ) from exc
    except Exception as exc:
        LOGGER.exception("fee_calculation_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc) or "Unexpected error occurred.",
        ) from exc
