"""
Base repository for the data access layer.
Repositories wrap a Session; services own the transaction.
"""

from typing import Generic, TypeVar, Optional, Type
from uuid import UUID
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Primary-key lookups plus two ways to write a row.

    add() only flushes, so a service can stage several writes (an expenditure,
    its items, the budget debit, the cart clear) and commit them together.
    create() commits straight away and is meant for single-row work such as
    issuing a token.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        return self.db.get(self.model, entity_id)

    def exists(self, entity_id: UUID) -> bool:
        return self.get_by_id(entity_id) is not None

    def add(self, entity: ModelType) -> ModelType:
        """Stage a new row in the current transaction"""
        self.db.add(entity)
        self.db.flush()
        return entity

    def create(self, entity: ModelType) -> ModelType:
        """Insert and commit a single row"""
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity
