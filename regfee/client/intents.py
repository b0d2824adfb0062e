"""Interpretation of assistant replies and fee result formatting."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

ROLE_OPTIONS = ("National", "CMS", "RMS")

# componentId -> form label for the unit inputs the form offers
UNIT_INPUTS: tuple[tuple[int, str], ...] = (
    (2, "Number of Strengths"),
    (4, "Number of Presentations"),
)


@dataclass
class UnitEntry:
    component_id: int
    quantity: float = 0

    def to_payload(self) -> dict[str, Any]:
        return {"componentId": self.component_id, "quantity": self.quantity}


@dataclass(frozen=True)
class FeeIntent:
    """A validated structured reply from the assistant."""

    agency_id: str
    procedure_id: int | float
    role: str
    units: list[UnitEntry] | None = None


@dataclass(frozen=True)
class PlainTextReply:
    text: str


@dataclass(frozen=True)
class BreakdownLine:
    component_name: str
    amount: float


@dataclass(frozen=True)
class FeeResult:
    total_fee: float
    currency: str
    breakdown: list[BreakdownLine] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FeeResult":
        items = payload.get("feeBreakdown") or []
        return cls(
            total_fee=float(payload.get("totalFee") or 0),
            currency=str(payload.get("currency") or "USD"),
            breakdown=[
                BreakdownLine(
                    component_name=str(item.get("componentName", "")),
                    amount=float(item.get("amount") or 0),
                )
                for item in items
                if isinstance(item, Mapping)
            ],
        )


def default_units() -> list[UnitEntry]:
    return [UnitEntry(component_id=component_id) for component_id, _ in UNIT_INPUTS]


def normalize_role(value: Any) -> str | None:
    """Match ``value`` case-insensitively against :data:`ROLE_OPTIONS`."""

    if not isinstance(value, str):
        return None
    candidate = value.strip().lower()
    return next((role for role in ROLE_OPTIONS if role.lower() == candidate), None)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str) and value.strip() and "_" not in value:
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def _compact(number: float) -> int | float:
    return int(number) if number.is_integer() else number


def parse_assistant_intent(payload: Any) -> FeeIntent | None:
    """Return a :class:`FeeIntent` when ``payload`` carries every required field."""

    if not isinstance(payload, Mapping):
        return None

    agency_candidate = payload.get("agencyId")
    if not isinstance(agency_candidate, str) or not agency_candidate:
        agency_candidate = payload.get("agency_id")
    agency_id = agency_candidate.strip() if isinstance(agency_candidate, str) else ""

    raw_procedure = payload.get("procedureId", payload.get("procedure_id"))
    procedure_id = _as_number(raw_procedure)

    raw_role = payload.get("role")
    role = normalize_role(raw_role if raw_role is not None else payload.get("Role"))

    if not agency_id or procedure_id is None or role is None:
        return None

    units: list[UnitEntry] | None = None
    raw_units = payload.get("units")
    if isinstance(raw_units, list):
        units = []
        for entry in raw_units:
            if not isinstance(entry, Mapping):
                continue
            component_id = _as_number(entry.get("componentId"))
            quantity = _as_number(entry.get("quantity"))
            if component_id is None or quantity is None:
                continue
            units.append(
                UnitEntry(component_id=_compact(component_id), quantity=_compact(quantity))
            )

    return FeeIntent(
        agency_id=agency_id,
        procedure_id=_compact(procedure_id),
        role=role,
        units=units,
    )


def interpret_reply(payload: Any) -> FeeIntent | PlainTextReply:
    """Split an assistant reply into a structured intent or text to show as-is."""

    intent = parse_assistant_intent(payload)
    if intent is not None:
        return intent
    if isinstance(payload, str):
        return PlainTextReply(payload)
    return PlainTextReply(json.dumps(payload, indent=2))


def sanitize_units_for_form(units: Sequence[UnitEntry] | None) -> list[UnitEntry]:
    """Project intent units onto the form's inputs; only positive quantities count."""

    quantities: dict[int, float] = {}
    for unit in units or []:
        if unit.quantity > 0:
            quantities[unit.component_id] = unit.quantity
    return [
        UnitEntry(component_id=component_id, quantity=quantities.get(component_id, 0))
        for component_id, _ in UNIT_INPUTS
    ]


def format_money(currency: str, value: float) -> str:
    return f"{currency} {value:,.2f}"


def format_fee_summary(result: FeeResult) -> str:
    total_line = format_money(result.currency, result.total_fee)
    lines = [
        f"{item.component_name}: {format_money(result.currency, item.amount)}"
        for item in result.breakdown
    ]
    return "\n".join([total_line, *lines])
