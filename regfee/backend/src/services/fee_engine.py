"""Regulatory fee calculation.

A calculation selects the fee rules for an ``(agency, procedure, role)``
triple and walks them in query order:

* component ``1`` is the base fee and is always charged once;
* any other component is charged only when the caller supplied units for
  it, and only for the units above the rule's included quantity.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import structlog

from regfee.backend.src.db import DataStoreError, FeeDataStore
from regfee.backend.src.schemas.fee import (
    FeeBreakdownItem,
    FeeCalculationRequest,
    FeeCalculationResult,
    UnitInput,
)
from regfee.backend.src.services.records import (
    AGENCY_TABLE,
    FEE_COMPONENT_TABLE,
    FEE_RULE_TABLE,
    FeeRule,
    agency_currency,
    component_name_map,
    format_quantity,
    to_identifier,
    to_number,
)

LOGGER = structlog.get_logger(__name__)

BASE_FEE_COMPONENT_ID = 1
DEFAULT_CURRENCY = "USD"


class FeeRequestError(ValueError):
    """Raised when a fee calculation request is malformed."""


def _parse_procedure_id(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    if not isinstance(value, (int, float, str)):
        return None
    number = to_number(value)
    if number is None:
        return None
    return int(number) if number.is_integer() else number


def sanitize_units(raw_units: Any) -> list[UnitInput]:
    """Keep unit entries with a numeric component id and a non-negative quantity.

    Anything else is dropped rather than failing the request.
    """

    if not isinstance(raw_units, list):
        return []

    units: list[UnitInput] = []
    for entry in raw_units:
        if not isinstance(entry, Mapping):
            continue
        component_id = to_identifier(entry.get("componentId"))
        quantity = to_number(entry.get("quantity"))
        if component_id is None or quantity is None or quantity < 0:
            continue
        units.append(UnitInput(component_id=component_id, quantity=quantity))
    return units


def parse_fee_request(payload: Mapping[str, Any]) -> FeeCalculationRequest:
    """Validate a raw request body before any data store access."""

    agency_id = payload.get("agencyId")
    if not isinstance(agency_id, str) or not agency_id.strip():
        raise FeeRequestError("agencyId is required.")

    procedure_id = _parse_procedure_id(payload.get("procedureId"))
    if procedure_id is None:
        raise FeeRequestError("procedureId must be a number.")

    role = payload.get("role")
    if not isinstance(role, str) or not role.strip():
        raise FeeRequestError("role is required.")

    return FeeCalculationRequest(
        agency_id=agency_id.strip(),
        procedure_id=procedure_id,
        role=role.strip(),
        units=sanitize_units(payload.get("units")),
    )


def resolve_agency_currency(store: FeeDataStore, agency_id: str) -> str:
    """Return the agency's currency, falling back to ``USD`` on any failure."""

    try:
        rows = store.query(AGENCY_TABLE, equals={"agency_id": agency_id})
        if not rows:
            rows = store.query(AGENCY_TABLE, equals={"id": agency_id})
    except DataStoreError as exc:
        LOGGER.warning(
            "agency_currency_lookup_failed", agency_id=agency_id, error=str(exc)
        )
        return DEFAULT_CURRENCY

    for row in rows:
        currency = agency_currency(row)
        if currency:
            return currency
    return DEFAULT_CURRENCY


def resolve_component_names(
    store: FeeDataStore, component_ids: Iterable[int]
) -> dict[int, str]:
    """Batch-resolve component display names; failures yield an empty map."""

    ids = sorted(set(component_ids))
    if not ids:
        return {}
    try:
        rows = store.query(FEE_COMPONENT_TABLE, within=("component_id", ids))
    except DataStoreError as exc:
        LOGGER.warning("fee_component_lookup_failed", component_ids=ids, error=str(exc))
        return {}
    return component_name_map(rows)


def fetch_fee_rules(store: FeeDataStore, request: FeeCalculationRequest) -> list[FeeRule]:
    """Return the rules for the request's triple, in query order."""

    rows = store.query(
        FEE_RULE_TABLE,
        equals={
            "agency_id": request.agency_id,
            "procedure_id": request.procedure_id,
            "role": request.role,
        },
    )
    return [FeeRule.from_row(row) for row in rows]


def calculate_fee(
    store: FeeDataStore, request: FeeCalculationRequest
) -> FeeCalculationResult:
    """Compute the total fee and its breakdown.

    Raises :class:`DataStoreError` only when the rules themselves cannot be
    fetched; currency and component-name lookups degrade to defaults.
    """

    rules = fetch_fee_rules(store, request)
    currency = resolve_agency_currency(store, request.agency_id)

    if not rules:
        LOGGER.info(
            "fee_rules_not_found",
            agency_id=request.agency_id,
            procedure_id=request.procedure_id,
            role=request.role,
        )
        return FeeCalculationResult(total_fee=0, currency=currency, fee_breakdown=[])

    names = resolve_component_names(
        store, (rule.component_id for rule in rules if rule.component_id is not None)
    )

    total_fee = 0.0
    breakdown: list[FeeBreakdownItem] = []

    for rule in rules:
        component_id = rule.component_id
        if component_id is None or component_id <= 0:
            continue
        if rule.amount_per_unit <= 0:
            continue

        component_name = rule.display_name(names)

        if component_id == BASE_FEE_COMPONENT_ID:
            total_fee += rule.amount_per_unit
            breakdown.append(
                FeeBreakdownItem(component_name=component_name, amount=rule.amount_per_unit)
            )
            continue

        unit = next(
            (entry for entry in request.units if entry.component_id == component_id),
            None,
        )
        if unit is None:
            continue

        billable = unit.quantity - rule.included_quantity
        if billable <= 0:
            continue

        cost = billable * rule.amount_per_unit
        total_fee += cost
        breakdown.append(
            FeeBreakdownItem(
                component_name=f"{component_name} (x{format_quantity(billable)})",
                amount=cost,
            )
        )

    LOGGER.info(
        "fee_calculated",
        agency_id=request.agency_id,
        procedure_id=request.procedure_id,
        role=request.role,
        total_fee=total_fee,
        items=len(breakdown),
    )
    return FeeCalculationResult(
        total_fee=total_fee, currency=currency, fee_breakdown=breakdown
    )


__all__ = [
    "BASE_FEE_COMPONENT_ID",
    "DEFAULT_CURRENCY",
    "FeeRequestError",
    "calculate_fee",
    "parse_fee_request",
    "resolve_agency_currency",
    "resolve_component_names",
    "sanitize_units",
]
