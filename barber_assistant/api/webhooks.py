from __future__ import annotations

import json
import logging

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from barber_assistant.application.dto.webhook_event import WebhookEventDTO
from barber_assistant.core.config import settings
from barber_assistant.infrastructure.whatsapp.webhook_verify import verify_get_request, verify_post_signature


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/webhooks/whatsapp")
def verify_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
):
    params = {
        "hub.mode": hub_mode or "",
        "hub.verify_token": hub_verify_token or "",
        "hub.challenge": hub_challenge or "",
    }
    challenge = verify_get_request(params, settings.WHATSAPP_VERIFY_TOKEN)
    if challenge is None:
        raise HTTPException(status_code=403, detail="Verification failed")
    return PlainTextResponse(challenge)


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(request: Request) -> Response:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        logger.error("Dispatcher not running")
        return Response(status_code=503)

    body = await request.body()
    signature = request.headers.get("X-Hub-Signature-256")
    if not verify_post_signature(body, signature, settings.WHATSAPP_APP_SECRET, settings.ENV):
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
        event = WebhookEventDTO.model_validate(payload)
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    messages = event.extract_messages()
    logger.info("Webhook received", extra={"reason": f"messages={len(messages)}"})

    for message in messages:
        await dispatcher.submit(message)

    return Response(status_code=200)
