"""Merchant and menu lookups used when adding to the cart"""

import logging
from typing import List
from uuid import UUID
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from domain.models import Merchant, Food
from repositories import MerchantRepository, FoodRepository

logger = logging.getLogger("mealbudget.catalog")


class CatalogService:
    @staticmethod
    def list_merchants(db: Session, skip: int = 0, limit: int = 50) -> List[Merchant]:
        return MerchantRepository(db).list_merchants(skip=skip, limit=limit)

    @staticmethod
    def get_menu(db: Session, merchant_id: UUID) -> List[Food]:
        if MerchantRepository(db).get_by_id(merchant_id) is None:
            raise NotFoundError(f"Merchant not found: {merchant_id}")
        return FoodRepository(db).get_by_merchant(merchant_id)
