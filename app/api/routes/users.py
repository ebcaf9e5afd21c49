from fastapi import APIRouter, Depends

from app.core.security import get_current_user
from app.models.user import UserRecord
from app.schemas.user import UserStatusOut

router = APIRouter()


@router.get("/user", response_model=UserStatusOut)
async def get_user_status(user: UserRecord = Depends(get_current_user)) -> UserStatusOut:
    return UserStatusOut(is_subscribed=bool(user.is_subscribed))
