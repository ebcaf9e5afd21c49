"""Plain user record handed out by the user store."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass
class UserRecord:
    id: str
    is_subscribed: bool = False
    subscription_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        return cls(
            id=str(data["id"]),
            is_subscribed=bool(data.get("is_subscribed", False)),
            subscription_id=data.get("subscription_id"),
        )
