"""Merchant and menu routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID

from api.dependencies import get_db
from api.responses import success_response
from domain.schemas.catalog_schemas import FoodResponse, MerchantResponse
from services.catalog_service import CatalogService

router = APIRouter(prefix="/merchants", tags=["Catalog"])


@router.get("")
def list_merchants(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    merchants = CatalogService.list_merchants(db, skip=skip, limit=limit)
    return success_response([MerchantResponse.model_validate(m) for m in merchants])


@router.get("/{merchant_id}/foods")
def get_menu(merchant_id: UUID, db: Session = Depends(get_db)):
    foods = CatalogService.get_menu(db, merchant_id)
    return success_response([FoodResponse.model_validate(f) for f in foods])
