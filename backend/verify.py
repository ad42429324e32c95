"""
backend/verify.py

Purpose:
    CLI entrypoint for the JSON store integrity check.

Dependencies:
    - trainerhub.database
    - trainerhub.checks.store_check
"""

import argparse
import asyncio
import os
import sys
from pprint import pprint

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from trainerhub.checks.store_check import StoreHealthCheck
from trainerhub.config import settings
from trainerhub.database import JSONStore


async def main(data_dir: str) -> int:
    print("\nSTARTING TRAINERHUB STORE CHECK")
    print("=" * 50)

    store = JSONStore(data_dir)
    if not store.data_dir.is_dir():
        print(f"\nSYSTEM RED: data directory {store.data_dir} does not exist")
        return 1

    report = await StoreHealthCheck.run(store)

    print("\n--- REPORT ---")
    pprint(report, indent=2)
    print("-" * 50)

    if report.get("status") == "HEALTHY":
        print("\nSYSTEM GREEN: all collections parse and ids are unique.")
        return 0

    print(f"\nSYSTEM RED: Status is {report.get('status')}")
    print("Check the problem list above.")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Check the integrity of the JSON data directory.")
    parser.add_argument("--data-dir", default=settings.DATA_DIR)
    args = parser.parse_args()
    raise SystemExit(asyncio.run(main(args.data_dir)))
