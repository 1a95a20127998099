from pydantic import BaseModel
from uuid import UUID


class MerchantResponse(BaseModel):
    merchant_id: UUID
    name: str

    model_config = {"from_attributes": True}


class FoodResponse(BaseModel):
    food_id: UUID
    merchant_id: UUID
    name: str
    price: int

    model_config = {"from_attributes": True}
