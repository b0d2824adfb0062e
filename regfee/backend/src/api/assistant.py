"""Routes for the natural-language fee assistant."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from regfee.backend.src.services import assistant
from regfee.backend.src.services.assistant import AssistantError

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["assistant"])


@router.post("/ask-assistant")
def ask_assistant(request: dict) -> JSONResponse:
    """Forward a chat message and return the model's JSON or text reply."""

    message = request.get("message")
    message = message.strip() if isinstance(message, str) else ""
    if not message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="message is required.",
        )

    try:
        reply = assistant.ask_assistant(message)
    except AssistantError as exc:
        LOGGER.error("assistant_request_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    except Exception as exc:
        LOGGER.exception("assistant_unexpected_error", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc) or "Failed to process request.",
        ) from exc

    return JSONResponse(content=reply)
