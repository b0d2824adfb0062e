"""Form and chat state for the expert fee form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Sequence
from uuid import uuid4

import structlog

from .api_client import ClientRequestError, FeeCalculatorClient
from .intents import (
    FeeIntent,
    FeeResult,
    UnitEntry,
    default_units,
    format_fee_summary,
    interpret_reply,
    sanitize_units_for_form,
)

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    sender: Literal["user", "assistant"]
    content: str
    id: str = field(default_factory=lambda: uuid4().hex)


class ExpertFormSession:
    """Client-side state of the fee form and its assistant chat.

    Failures from the API never clear selections or units; they surface as
    ``error_message`` and, for chat turns, as an assistant message.
    """

    def __init__(self, client: FeeCalculatorClient) -> None:
        self.client = client
        self.agencies: list[dict[str, Any]] = []
        self.procedures: list[dict[str, Any]] = []
        self.selected_agency: str = ""
        self.selected_procedure: int | float | None = None
        self.selected_role: str = "National"
        self.units: list[UnitEntry] = default_units()
        self.fee_result: FeeResult | None = None
        self.error_message: str | None = None
        self.messages: list[ChatMessage] = []

    def load_reference_data(self) -> None:
        self.error_message = None
        try:
            agencies = self.client.list_agencies()
            procedures = self.client.list_procedures()
        except ClientRequestError as exc:
            self.error_message = str(exc)
            return
        self.agencies = agencies
        self.procedures = procedures

    def select_agency(self, agency_id: str) -> None:
        self.selected_agency = agency_id
        self.fee_result = None

    def select_procedure(self, procedure_id: int | float | None) -> None:
        if procedure_id != self.selected_procedure:
            self.units = default_units()
        self.selected_procedure = procedure_id
        self.fee_result = None

    def select_role(self, role: str) -> None:
        self.selected_role = role
        self.fee_result = None

    def set_unit(self, component_id: int, quantity: float) -> None:
        self.units = [
            UnitEntry(component_id=unit.component_id, quantity=quantity)
            if unit.component_id == component_id
            else unit
            for unit in self.units
        ]

    def _calculate(
        self,
        *,
        agency_id: str | None = None,
        procedure_id: int | float | None = None,
        role: str | None = None,
        units: Sequence[UnitEntry] | None = None,
    ) -> FeeResult:
        agency_id = (agency_id if agency_id is not None else self.selected_agency).strip()
        procedure_id = procedure_id if procedure_id is not None else self.selected_procedure
        role = role or self.selected_role
        if not agency_id or procedure_id is None or not role:
            raise ClientRequestError("Agency, procedure, and role are all required.")

        self.error_message = None
        payload_units = [
            UnitEntry(component_id=unit.component_id, quantity=max(0, unit.quantity or 0))
            for unit in (units if units is not None else self.units)
        ]
        result = self.client.calculate_fee(
            agency_id,
            procedure_id,
            role,
            [unit for unit in payload_units if unit.quantity > 0],
        )
        self.fee_result = result
        return result

    def calculate(self) -> FeeResult | None:
        """Run the calculation for the current selections."""

        if not self.selected_agency or not self.selected_procedure or not self.selected_role:
            self.error_message = "Please complete all selections before calculating."
            return None
        try:
            return self._calculate()
        except ClientRequestError as exc:
            self.fee_result = None
            self.error_message = str(exc)
            return None

    def _apply_intent(self, intent: FeeIntent) -> list[UnitEntry]:
        units = sanitize_units_for_form(intent.units)
        self.selected_agency = intent.agency_id
        self.selected_procedure = intent.procedure_id
        self.selected_role = intent.role
        self.units = units
        return units

    def _say(self, content: str) -> None:
        self.messages.append(ChatMessage(sender="assistant", content=content))

    def send_chat(self, message: str) -> None:
        """Send a chat turn and act on the assistant's reply."""

        message = message.strip()
        if not message:
            return
        self.messages.append(ChatMessage(sender="user", content=message))

        try:
            payload = self.client.ask_assistant(message)
        except ClientRequestError as exc:
            LOGGER.warning("assistant_turn_failed", error=str(exc))
            self.error_message = str(exc)
            self._say(f"Sorry, something went wrong: {exc}")
            return

        reply = interpret_reply(payload)
        if not isinstance(reply, FeeIntent):
            self._say(reply.text)
            return

        units = self._apply_intent(reply)
        try:
            result = self._calculate(
                agency_id=reply.agency_id,
                procedure_id=reply.procedure_id,
                role=reply.role,
                units=units,
            )
        except ClientRequestError as exc:
            self.error_message = str(exc)
            self._say(f"I tried to calculate the fee but ran into an issue: {exc}")
            return

        self._say(
            f"I found that fee for you. Here is the result:\n{format_fee_summary(result)}"
        )
