"""
Seed script for a running ReliefHub server.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to a running server: python scripts/seed_db.py --apply
  - Different server: python scripts/seed_db.py --apply --base-url http://localhost:9000

Behavior:
  - Loads `db_seed.json` from the working directory.
  - POSTs each relief point to /relief-points.

NOTE: State is process-lifetime only, so seeding targets a live server.
To seed at startup instead, set SEED_DEMO_DATA=true in `.env`.
"""

import argparse
import json
import os

import requests


def load_seed(path: str = "./db_seed.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def post_relief_points(base_url: str, seed: dict, apply: bool = False, timeout: float = 5.0) -> int:
    written = 0
    for point in seed.get("relief_points", []):
        label = point.get("id") or point.get("title")
        print(f"Preparing: relief_points/{label}")
        if not apply:
            continue
        try:
            response = requests.post(f"{base_url}/relief-points", json=point, timeout=timeout)
            if response.status_code == 409:
                print(f"Skipped (already exists): relief_points/{label}")
                continue
            response.raise_for_status()
            written += 1
            print(f"Wrote: relief_points/{label}")
        except requests.RequestException as e:
            print(f"Failed to write relief_points/{label}: {e}")
    return written


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="POST the seed to the server instead of dry-run")
    parser.add_argument("--base-url", default="http://localhost:8000", help="Server base URL")
    parser.add_argument("--seed-file", default=os.path.join(os.getcwd(), "db_seed.json"))
    args = parser.parse_args()

    if not os.path.exists(args.seed_file):
        print(f"Seed file not found: {args.seed_file}")
        return

    seed = load_seed(args.seed_file)
    written = post_relief_points(args.base_url.rstrip("/"), seed, apply=args.apply)

    if args.apply:
        print(f"Seeding completed ({written} written).")
    else:
        print("Dry run complete. Re-run with --apply to write to the server.")


if __name__ == "__main__":
    main()
