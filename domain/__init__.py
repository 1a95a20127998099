"""
Domain layer - Business entities, models, schemas, and enums.

ORM models live in domain.models and are imported explicitly where needed, so
the client core can use the schemas without touching the database layer.
"""

from domain import enums, schemas

__all__ = ["enums", "schemas"]
