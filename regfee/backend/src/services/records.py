"""Normalisation of loosely-typed reference rows.

Reference tables have been through several schema revisions, so a single
logical field can live under different column names. Each field is read
through an ordered tuple of candidate columns; the first present,
non-empty value wins.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Sequence

from regfee.backend.src.schemas.reference import AgencyOption, ProcedureOption

AGENCY_TABLE = "tbl_agencies"
PROCEDURE_TABLE = "tbl_procedure_types"
FEE_RULE_TABLE = "tbl_fee_rules"
FEE_COMPONENT_TABLE = "tbl_fee_components"

AGENCY_ID_COLUMNS = ("agency_id", "agencyid", "id")
PROCEDURE_ID_COLUMNS = ("procedure_id", "procedureid", "id")
COMPONENT_ID_COLUMNS = ("component_id", "componentid", "id")
DISPLAY_NAME_COLUMNS = ("display_name", "displayname", "name")
COMPONENT_NAME_COLUMNS = ("component_name", "display_name", "name")
CURRENCY_COLUMNS = ("currency", "currency_code")

RULE_COMPONENT_ID_COLUMNS = ("component_id", "componentid")
RULE_AMOUNT_COLUMNS = ("amount_per_unit", "amount")
RULE_INCLUDED_QUANTITY_COLUMNS = ("included_quantity", "includedquantity")
RULE_COMPONENT_NAME_COLUMNS = ("component_name",)

UNTITLED_AGENCY = "Untitled Agency"


def first_present(row: Mapping[str, Any], candidates: Sequence[str]) -> Any | None:
    """Return the first non-empty value found under ``candidates``."""

    for key in candidates:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        return value
    return None


def to_number(value: Any) -> float | None:
    """Coerce numbers and numeric strings to a finite float."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_identifier(value: Any) -> int | None:
    """Coerce a numeric identifier; fractional values are not identifiers."""

    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def format_quantity(value: float) -> str:
    """Render ``2.0`` as ``2`` and keep genuine fractions."""

    return str(int(value)) if float(value).is_integer() else str(value)


def normalize_agency(row: Mapping[str, Any]) -> AgencyOption:
    stable_id = first_present(row, AGENCY_ID_COLUMNS)
    name = first_present(row, DISPLAY_NAME_COLUMNS)
    return AgencyOption(
        id="" if stable_id is None else str(stable_id),
        name=str(name) if name is not None else UNTITLED_AGENCY,
    )


def normalize_procedure(row: Mapping[str, Any]) -> ProcedureOption:
    procedure_id = to_identifier(first_present(row, PROCEDURE_ID_COLUMNS)) or 0
    name = first_present(row, DISPLAY_NAME_COLUMNS)
    return ProcedureOption(
        id=procedure_id,
        name=str(name) if name is not None else f"Procedure {procedure_id}",
    )


def component_name_map(rows: Sequence[Mapping[str, Any]]) -> dict[int, str]:
    """Map component ids to display names, skipping unusable rows."""

    names: dict[int, str] = {}
    for row in rows:
        component_id = to_identifier(first_present(row, COMPONENT_ID_COLUMNS))
        name = first_present(row, COMPONENT_NAME_COLUMNS)
        if component_id is None or name is None:
            continue
        names[component_id] = str(name)
    return names


def agency_currency(row: Mapping[str, Any]) -> str | None:
    currency = first_present(row, CURRENCY_COLUMNS)
    return str(currency) if currency is not None else None


@dataclass(frozen=True)
class FeeRule:
    """A fee rule row with its numeric fields coerced and floored at zero."""

    component_id: int | None
    amount_per_unit: float
    included_quantity: float
    component_name: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FeeRule":
        amount = to_number(first_present(row, RULE_AMOUNT_COLUMNS)) or 0.0
        included = to_number(first_present(row, RULE_INCLUDED_QUANTITY_COLUMNS)) or 0.0
        override = first_present(row, RULE_COMPONENT_NAME_COLUMNS)
        return cls(
            component_id=to_identifier(first_present(row, RULE_COMPONENT_ID_COLUMNS)),
            amount_per_unit=max(0.0, amount),
            included_quantity=max(0.0, included),
            component_name=str(override) if override is not None else None,
        )

    def display_name(self, names: Mapping[int, str]) -> str:
        """Resolve the rule's label: rule override, component table, synthesised."""

        if self.component_name:
            return self.component_name
        if self.component_id is not None and self.component_id in names:
            return names[self.component_id]
        if self.component_id:
            return f"Component {self.component_id}"
        return "Component"


__all__ = [
    "AGENCY_TABLE",
    "FEE_COMPONENT_TABLE",
    "FEE_RULE_TABLE",
    "PROCEDURE_TABLE",
    "FeeRule",
    "agency_currency",
    "component_name_map",
    "first_present",
    "format_quantity",
    "normalize_agency",
    "normalize_procedure",
    "to_identifier",
    "to_number",
]
