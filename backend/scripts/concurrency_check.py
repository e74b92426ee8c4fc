#!/usr/bin/env python3
import requests
import time
import json
import os
import sys
import logging
from concurrent.futures import ThreadPoolExecutor

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

BASE_URL = os.environ.get("CATALOG_API_URL", "http://localhost:8000/api/v1")
PRODUCT_ID = os.environ.get("CONCURRENCY_PRODUCT_ID", "laptop-se")
PARALLEL_REQUESTS = 10


def put_discount(body: dict) -> requests.Response:
    return requests.put(f"{BASE_URL}/products/{PRODUCT_ID}/discount", json=body, timeout=30)


def run_check() -> bool:
    """
    Fires identical discount requests in parallel against a running server.

    Exactly one request must report the discount as applied; every other
    request must report it as already applied, and the product must carry
    the discount exactly once afterwards.

    Returns:
        True when the exactly-once guarantee held.
    """
    body = {"discountId": f"TEST_{int(time.time() * 1000)}", "percent": 5}
    logger.info(f"=== {PARALLEL_REQUESTS} parallel PUT /products/{PRODUCT_ID}/discount ===")

    start = time.time()
    with ThreadPoolExecutor(max_workers=PARALLEL_REQUESTS) as pool:
        responses = list(pool.map(lambda _: put_discount(body), range(PARALLEL_REQUESTS)))
    elapsed_ms = int((time.time() - start) * 1000)

    failed = [r for r in responses if r.status_code != 200]
    for r in failed:
        logger.error(f"Failed ({r.status_code}): {r.text}")

    outcomes = [r.json().get("outcome") for r in responses if r.status_code == 200]
    applied = outcomes.count("applied")
    already = outcomes.count("already_applied")

    product = requests.get(f"{BASE_URL}/products/{PRODUCT_ID}", timeout=10).json()
    stored = [d for d in product.get("discounts", []) if d["discountId"] == body["discountId"]]

    summary = {"applied": applied, "alreadyApplied": already, "stored": len(stored), "elapsedMs": elapsed_ms}
    logger.info(json.dumps(summary, indent=2))

    passed = not failed and applied == 1 and already == PARALLEL_REQUESTS - 1 and len(stored) == 1
    if passed:
        logger.info(f"PASSED: 1 applied, {already} already applied ({elapsed_ms}ms)")
    else:
        logger.error(f"FAILED: {applied} applied (should be 1)")
    return passed


if __name__ == "__main__":
    try:
        ok = run_check()
    except requests.exceptions.ConnectionError:
        logger.error(f"Connection Error: Is the backend server running at {BASE_URL}?")
        sys.exit(1)
    sys.exit(0 if ok else 1)
