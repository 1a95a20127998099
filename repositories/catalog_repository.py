"""
Catalog Repository - Data access layer for merchants and their menus
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Merchant, Food


class MerchantRepository(BaseRepository[Merchant]):
    """Repository for merchant data access"""

    def __init__(self, db: Session):
        super().__init__(db, Merchant)

    def list_merchants(self, skip: int = 0, limit: int = 50) -> List[Merchant]:
        return (
            self.db.query(Merchant)
            .order_by(Merchant.name)
            .offset(skip)
            .limit(limit)
            .all()
        )


class FoodRepository(BaseRepository[Food]):
    """Repository for menu item data access"""

    def __init__(self, db: Session):
        super().__init__(db, Food)

    def get_by_merchant(self, merchant_id: UUID) -> List[Food]:
        return (
            self.db.query(Food)
            .filter(Food.merchant_id == merchant_id)
            .order_by(Food.name)
            .all()
        )

    def get_for_merchant(self, food_id: UUID, merchant_id: UUID) -> Optional[Food]:
        return (
            self.db.query(Food)
            .filter(Food.food_id == food_id, Food.merchant_id == merchant_id)
            .first()
        )
