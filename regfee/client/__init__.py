"""Python client for the fee calculator API and its form/chat session."""

from .api_client import ClientRequestError, FeeCalculatorClient
from .intents import (
    ROLE_OPTIONS,
    UNIT_INPUTS,
    FeeIntent,
    FeeResult,
    PlainTextReply,
    UnitEntry,
    format_fee_summary,
    interpret_reply,
    parse_assistant_intent,
)
from .session import ChatMessage, ExpertFormSession

__all__ = [
    "ROLE_OPTIONS",
    "UNIT_INPUTS",
    "ChatMessage",
    "ClientRequestError",
    "ExpertFormSession",
    "FeeCalculatorClient",
    "FeeIntent",
    "FeeResult",
    "PlainTextReply",
    "UnitEntry",
    "format_fee_summary",
    "interpret_reply",
    "parse_assistant_intent",
]
