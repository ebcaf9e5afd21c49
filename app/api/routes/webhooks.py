"""
Payment provider webhooks
"""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from app.config import Settings, get_settings
from app.core.exceptions import WebhookPayloadError
from app.core.security import SIGNATURE_HEADER, verify_webhook_signature
from app.services.user_store import UserStore, get_user_store
from app.services.webhook_processor import apply_lemonsqueezy_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/lemonsqueezy")
async def lemonsqueezy_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: UserStore = Depends(get_user_store),
):
    # Signature covers the bytes exactly as sent.
    raw_body = await request.body()

    secret = settings.webhook_secret
    if not secret:
        logger.warning("No Lemon Squeezy webhook secret configured. Accepting webhook unverified.")
    elif not verify_webhook_signature(raw_body, request.headers.get(SIGNATURE_HEADER), secret):
        logger.warning("Rejected Lemon Squeezy webhook with invalid signature")
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"error": "Invalid signature"},
        )

    try:
        payload = json.loads(raw_body)
        await run_in_threadpool(apply_lemonsqueezy_event, payload, store)
    except WebhookPayloadError as exc:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})
    except Exception:
        logger.exception("Webhook error")
        return PlainTextResponse("Webhook Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return PlainTextResponse("OK", status_code=status.HTTP_200_OK)
