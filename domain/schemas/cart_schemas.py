from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, time, datetime
from uuid import UUID

from domain.enums import MealType, MIN_CART_QUANTITY, MAX_CART_QUANTITY


# ============================================================================
# Cart
# ============================================================================


class AddCartItemRequest(BaseModel):
    """Add a food to the cart; replace_cart clears another merchant's cart first"""

    merchant_id: UUID
    food_id: UUID
    quantity: int = Field(
        default=1, ge=MIN_CART_QUANTITY, le=MAX_CART_QUANTITY, description="Units to add"
    )
    replace_cart: bool = Field(
        default=False,
        description="Atomically clear a cart holding another merchant's items before adding",
    )


class UpdateCartItemRequest(BaseModel):
    """Set a line quantity; anything below 1 removes the line"""

    quantity: int = Field(..., le=MAX_CART_QUANTITY)


class CartItemResponse(BaseModel):
    cart_item_id: UUID
    food_id: UUID
    food_name: str
    merchant_id: UUID
    unit_price: int
    quantity: int
    line_total: int

    model_config = {"from_attributes": True}


class CartResponse(BaseModel):
    """Full cart as stored on the server; an empty cart has no merchant"""

    cart_id: Optional[UUID] = None
    merchant_id: Optional[UUID] = None
    merchant_name: Optional[str] = None
    items: List[CartItemResponse] = Field(default_factory=list)
    total_amount: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find_item(self, cart_item_id: UUID) -> Optional[CartItemResponse]:
        return next((i for i in self.items if i.cart_item_id == cart_item_id), None)


class AddCartItemResponse(BaseModel):
    cart_item_id: UUID
    food_id: UUID
    food_name: str
    quantity: int
    line_total: int
    cart_total_amount: int
    replaced_cart: bool


class UpdateCartItemResponse(BaseModel):
    cart_item_id: UUID
    quantity: int
    line_total: int
    cart_total_amount: int
    removed: bool = False


# ============================================================================
# Checkout
# ============================================================================


class CheckoutRequest(BaseModel):
    """Turn the current cart into an expenditure"""

    meal_type: MealType
    occurred_date: date = Field(..., description="Day the meal happened; not in the future")
    occurred_time: time
    discount: int = Field(default=0, ge=0)
    memo: Optional[str] = Field(None, max_length=500)


class BudgetSummary(BaseModel):
    """Budget position of the debited buckets before and after a checkout"""

    meal_type: MealType
    meal_budget: int
    meal_spent: int
    meal_remaining_before: int
    meal_remaining_after: int
    daily_budget: int
    daily_spent: int
    daily_remaining_before: int
    daily_remaining_after: int
    monthly_budget: int
    monthly_spent: int
    monthly_remaining_before: int
    monthly_remaining_after: int


class CheckoutItem(BaseModel):
    food_id: Optional[UUID] = None
    food_name: str
    unit_price: int
    quantity: int
    line_total: int

    model_config = {"from_attributes": True}


class CheckoutResponse(BaseModel):
    expenditure_id: UUID
    merchant_id: Optional[UUID] = None
    merchant_name: str
    items: List[CheckoutItem]
    subtotal: int
    discount: int
    final_amount: int
    meal_type: MealType
    occurred_date: date
    occurred_time: time
    budget_summary: BudgetSummary
    created_at: Optional[datetime] = None
