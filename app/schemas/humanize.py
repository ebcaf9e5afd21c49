from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class HumanizeRequest(BaseModel):
    text: str
    tone: Optional[str] = "Standard"


class HumanizeResponse(BaseModel):
    text: str


class DetectAIRequest(BaseModel):
    text: str = ""


class DetectAIResponse(BaseModel):
    aiPercentage: int = Field(ge=0, le=100)
