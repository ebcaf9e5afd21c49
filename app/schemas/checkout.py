from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    variantId: str = Field(min_length=1)


class CheckoutResponse(BaseModel):
    url: str
