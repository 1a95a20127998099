#!/usr/bin/env python3
"""
Standalone database initialization script
Creates the tables, seeds a demo user with a few merchants and menus, and
prints a bearer token pair for trying the API.
"""

import sys
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("init_db")

DEMO_EMAIL = "demo@mealbudget.local"

DEMO_MENUS = {
    "Corner Bistro": [("Bibimbap", 9500), ("Kimchi Stew", 9000), ("Rice", 1000)],
    "Noodle House": [("Ramen", 8500), ("Gyoza", 4500), ("Iced Tea", 2000)],
    "Morning Bakery": [("Croissant", 3500), ("Latte", 4500), ("Bagel", 3000)],
}


def init_tables():
    """Create every table"""
    logger.info("=" * 60)
    logger.info("Initializing database tables...")
    logger.info("=" * 60)

    from domain.models.database import init_database, engine
    from sqlalchemy import inspect

    init_database()
    tables = inspect(engine).get_table_names()
    logger.info(f"✓ Created {len(tables)} tables: {', '.join(tables)}")


def seed_catalog(db):
    """Create the demo merchants and their menus, skipping ones that exist"""
    from domain.models import Merchant, Food

    for merchant_name, foods in DEMO_MENUS.items():
        if db.query(Merchant).filter(Merchant.name == merchant_name).first():
            logger.info(f"✓ Merchant '{merchant_name}' already present")
            continue
        merchant = Merchant(
            name=merchant_name,
            foods=[Food(name=name, price=price) for name, price in foods],
        )
        db.add(merchant)
        logger.info(f"✓ Added merchant '{merchant_name}' with {len(foods)} foods")
    db.commit()


def seed_user(db):
    """Create the demo user and return a fresh token pair"""
    from repositories import UserRepository
    from services.auth_service import AuthService

    user_repo = UserRepository(db)
    user = user_repo.get_by_email(DEMO_EMAIL)
    if user is None:
        user = user_repo.create_user(DEMO_EMAIL, full_name="Demo User")
        logger.info(f"✓ Created demo user {DEMO_EMAIL}")
    return AuthService.issue_tokens(db, user.user_id)


def main() -> int:
    from domain.models.database import SessionLocal

    try:
        init_tables()
        db = SessionLocal()
        try:
            seed_catalog(db)
            tokens = seed_user(db)
        finally:
            db.close()
    except Exception as e:
        logger.error(f"✗ Database initialization failed: {e}", exc_info=True)
        return 1

    print("\n" + "=" * 60)
    print("MealBudget database ready")
    print("=" * 60)
    print(f"  user:          {DEMO_EMAIL}")
    print(f"  access token:  {tokens.access_token}")
    print(f"  refresh token: {tokens.refresh_token}")
    print("=" * 60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
