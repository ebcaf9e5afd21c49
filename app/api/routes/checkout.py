from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_checkout_client
from app.core.exceptions import IntegrationError
from app.core.security import get_current_user
from app.integrations.lemonsqueezy import LemonSqueezyClient
from app.models.user import UserRecord
from app.schemas.checkout import CheckoutRequest, CheckoutResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    payload: CheckoutRequest,
    user: UserRecord = Depends(get_current_user),
    client: LemonSqueezyClient = Depends(get_checkout_client),
):
    try:
        url = await client.create_checkout(payload.variantId, user.id)
    except IntegrationError as exc:
        logger.error("Checkout failed for user %s: %s", user.id, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )
    return CheckoutResponse(url=url)
