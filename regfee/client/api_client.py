"""HTTP client for the fee calculator API."""

from __future__ import annotations

from typing import Any, Sequence

import httpx
import structlog

from .intents import FeeResult, UnitEntry

LOGGER = structlog.get_logger(__name__)


class ClientRequestError(RuntimeError):
    """Raised when an API call fails; carries the server's error message."""


class FeeCalculatorClient:
    """Thin wrapper over the ``/api`` endpoints."""

    def __init__(self, http: httpx.Client, *, prefix: str = "/api") -> None:
        self._http = http
        self._prefix = prefix.rstrip("/")

    def _request(
        self,
        method: str,
        path: str,
        *,
        default_error: str,
        json: Any | None = None,
    ) -> Any:
        try:
            response = self._http.request(method, f"{self._prefix}{path}", json=json)
        except httpx.HTTPError as exc:
            LOGGER.warning("fee_api_transport_failed", path=path, error=str(exc))
            raise ClientRequestError(str(exc) or default_error) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ClientRequestError(message or default_error)
        return payload

    def list_agencies(self) -> list[dict[str, Any]]:
        payload = self._request("GET", "/agencies", default_error="Failed to load agencies.")
        return list((payload or {}).get("agencies") or [])

    def list_procedures(self) -> list[dict[str, Any]]:
        payload = self._request(
            "GET", "/procedures", default_error="Failed to load procedures."
        )
        return list((payload or {}).get("procedures") or [])

    def calculate_fee(
        self,
        agency_id: str,
        procedure_id: int | float,
        role: str,
        units: Sequence[UnitEntry] = (),
    ) -> FeeResult:
        payload = self._request(
            "POST",
            "/calculate-fee",
            default_error="Failed to calculate fee.",
            json={
                "agencyId": agency_id,
                "procedureId": procedure_id,
                "role": role,
                "units": [unit.to_payload() for unit in units],
            },
        )
        return FeeResult.from_payload(payload or {})

    def ask_assistant(self, message: str) -> Any:
        return self._request(
            "POST",
            "/ask-assistant",
            default_error="Assistant request failed.",
            json={"message": message},
        )
