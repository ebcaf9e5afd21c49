from __future__ import annotations

from pydantic import BaseModel


class UserStatusOut(BaseModel):
    is_subscribed: bool
