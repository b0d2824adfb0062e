"""Fee calculation request and response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UnitInput(CamelModel):
    """Caller-supplied quantity for an optional fee component."""

    component_id: int
    quantity: float


class FeeCalculationRequest(CamelModel):
    """Validated fee calculation request."""

    agency_id: str
    procedure_id: int | float
    role: str
    units: list[UnitInput] = Field(default_factory=list)


class FeeBreakdownItem(CamelModel):
    component_name: str
    amount: float


class FeeCalculationResult(CamelModel):
    """Total fee with its itemised breakdown."""

    total_fee: float
    currency: str
    fee_breakdown: list[FeeBreakdownItem]
