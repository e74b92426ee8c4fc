#!/usr/bin/env python3
import os
import sys
import requests
from sqlalchemy import inspect

# Add the parent directory to sys.path to allow imports from the backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Settings, dotenv_paths
from db import build_engine, database_status

REQUIRED_TABLES = ['products', 'product_discounts']

def print_status(check_name: str, status: bool, details: str = ""):
    """
    Renders the status of a health system check to the console.

    Args:
        check_name: Human-readable identifier for the check.
        status: Boolean indicating success or failure.
        details: Optional supplementary information (e.g., file paths, URLs).
    """
    color = "\033[92m[OK]\033[0m" if status else "\033[91m[FAIL]\033[0m"
    print(f"{color} {check_name:<30} {details}")

def run_healthcheck() -> bool:
    """
    Coordinates a verification of the backend environment.

    Validates the .env lookup, database connectivity and schema, and whether
    a running API instance answers its health endpoint.

    Returns:
        True when every check passed.
    """
    print("\n=== Catalog Pricing Health Verification ===\n")

    # 1. Check .env file (optional; plain environment variables work too)
    env_path = next((p for p in dotenv_paths if os.path.exists(p)), None)
    print_status(".env file found", True, env_path or "none, using process environment")

    settings = Settings.from_env()
    print_status("DATABASE_URL", True, settings.DATABASE_URL)

    # 2. Check database connectivity and schema
    engine = build_engine(settings.DATABASE_URL)
    status = database_status(engine)
    print_status("Database connection", status["connected"], status["type"])
    if not status["connected"]:
        return False

    tables = inspect(engine).get_table_names()
    has_tables = all(t in tables for t in REQUIRED_TABLES)
    print_status("Database schema initialized", has_tables, f"Found {len(tables)} tables")

    # 3. Check a running API instance
    api_url = os.environ.get("CATALOG_API_URL", f"http://localhost:{settings.PORT}/api/v1")
    try:
        r = requests.get(f"{api_url}/health", timeout=5)
        api_ok = r.status_code == 200
        print_status("API health endpoint", api_ok, f"HTTP {r.status_code}")
    except requests.exceptions.RequestException as e:
        api_ok = False
        print_status("API health endpoint", False, str(e))

    print("\nHealth check completed.")
    return has_tables and api_ok

if __name__ == "__main__":
    sys.exit(0 if run_healthcheck() else 1)
