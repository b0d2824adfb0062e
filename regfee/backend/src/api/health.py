"""Health check endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from regfee.backend.src.db import DataStoreError, FeeDataStore, get_fee_store

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health/live")
def liveness() -> dict[str, str]:
    """Return a liveness indicator."""

    return {"status": "live"}


@router.get("/health/ready")
def readiness(store: FeeDataStore = Depends(get_fee_store)) -> dict[str, str]:
    """Return readiness information, ensuring the data store is reachable."""

    try:
        store.ping()
    except DataStoreError as exc:
        LOGGER.warning("readiness_check_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Data store is unavailable.",
        ) from exc
    return {"status": "ready"}
