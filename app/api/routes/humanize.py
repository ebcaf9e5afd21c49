"""
Humanize and AI-detection routes
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_humanizer_service
from app.config import Settings, get_settings
from app.core.exceptions import IntegrationError
from app.core.security import get_current_user
from app.models.user import UserRecord
from app.schemas.humanize import (
    DetectAIRequest,
    DetectAIResponse,
    HumanizeRequest,
    HumanizeResponse,
)
from app.services.humanizer import HumanizerService, count_words

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/humanize", response_model=HumanizeResponse)
async def humanize(
    payload: HumanizeRequest,
    user: UserRecord = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    service: HumanizerService = Depends(get_humanizer_service),
):
    if count_words(payload.text) > settings.free_word_limit and not user.is_subscribed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Subscription required for over {settings.free_word_limit} words.",
        )

    try:
        text = await service.humanize(payload.text, payload.tone)
    except IntegrationError as exc:
        logger.error("Humanize LLM error for user %s: %s", user.id, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "LLM API Error", "details": str(exc)},
        )
    return HumanizeResponse(text=text)


@router.post("/detect-ai", response_model=DetectAIResponse)
async def detect_ai(
    payload: DetectAIRequest,
    user: UserRecord = Depends(get_current_user),
    service: HumanizerService = Depends(get_humanizer_service),
):
    if not payload.text.strip():
        return DetectAIResponse(aiPercentage=0)

    try:
        percentage = await service.detect_ai_percentage(payload.text)
    except IntegrationError as exc:
        logger.error("AI detection error for user %s (text starts %r): %s", user.id, payload.text[:100], exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "AI detection failed", "details": str(exc)},
        )
    return DetectAIResponse(aiPercentage=percentage)
