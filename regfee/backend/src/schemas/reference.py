"""Reference data schemas for the fee form selectors."""

from __future__ import annotations

from pydantic import BaseModel


class AgencyOption(BaseModel):
    """An agency entry offered in the form."""

    id: str
    name: str


class AgencyList(BaseModel):
    agencies: list[AgencyOption]


class ProcedureOption(BaseModel):
    """A procedure type entry offered in the form."""

    id: int
    name: str


class ProcedureList(BaseModel):
    procedures: list[ProcedureOption]
