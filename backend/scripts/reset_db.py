#!/usr/bin/env python3
import os
import sys

# Add the parent directory to sys.path to allow imports from the backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Settings
from db import build_engine, make_session_factory
from services.ledger import DiscountLedger
from services.seed import seed_products
from utils import clear_database

def main():
    """
    CLI utility for performing a complete reset of the catalog database.

    Drops all existing tables, recreates the schema and loads the demo
    products again.
    """
    settings = Settings.from_env()
    print(f"WARNING: This will permanently delete all products and applied discounts in {settings.DATABASE_URL}.")
    confirm = input("Are you sure you want to reset the database? (y/N): ")
    if confirm.lower() == 'y':
        engine = build_engine(settings.DATABASE_URL)
        clear_database(engine)
        created = seed_products(DiscountLedger(make_session_factory(engine)))
        print(f"Database reset successfully. Seeded {created} products.")
    else:
        print("Reset cancelled.")

if __name__ == "__main__":
    main()
