#!/usr/bin/env python3
"""Seed demo burial plots into a running gravemap backend.

Usage:
    # Start the backend first:
    python3 -m gravemap.web --port 8080

    # Seed demo plots:
    python3 scripts/seed_demo_plots.py

    # Seed against a different host:
    python3 scripts/seed_demo_plots.py --base-url http://localhost:9000

All plots go through the map session write endpoints, so coordinates are
validated and normalised exactly as for a real user. With the in-memory
record store, restarting the backend clears them again.
"""

from __future__ import annotations

import argparse
import sys

import httpx

DEFAULT_BASE_URL = "http://localhost:8080"

AVAILABLE_PLOTS = [
    {"Permit": "P-9001", "Lot": "31", "Block": "F", "Grave": "1",
     "lat": "26°11'42\"S", "lng": "28°01'41\"E"},
    {"Permit": "P-9002", "Lot": "31", "Block": "F", "Grave": "2",
     "lat": -26.19502, "lng": 28.02808},
    {"Permit": "P-9003", "Lot": "31", "Block": "F", "Grave": "3",
     "lat": "26° 11' 42'' S", "lng": "28° 1' 41.5'' E"},
]

OCCUPIED_PLOTS = [
    {"Permit": "P-9101", "Lot": "32", "Block": "F", "Grave": "1",
     "lat": -26.19511, "lng": 28.02790,
     "DecID": "D-9101", "DecNama": "Nomsa", "DecSurname": "Zulu", "sex": "F",
     "DoB": "1936-12-01", "DoD": "2018-06-17"},
    {"Permit": "P-9102", "Lot": "32", "Block": "F", "Grave": "2",
     "lat": "26°11'43\"S", "lng": 28.02797,
     "DecID": "D-9102", "DecNama": "Pieter", "DecSurname": "van Wyk", "sex": "M",
     "DoB": "1944-02-23", "DoD": "2020-10-05"},
]


def api(client: httpx.Client, method: str, path: str, *, json: dict | None = None) -> dict | None:
    """Make an API call and return parsed JSON, or None on failure."""
    resp = client.request(method, path, json=json)
    if resp.status_code >= 400:
        print(f"  FAILED {method} {path} -> {resp.status_code}: {resp.text[:200]}")
        return None
    if resp.headers.get("content-type", "").startswith("application/json"):
        return resp.json()
    return None


def section(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


def seed_plots(client: httpx.Client, session_id: str) -> int:
    section("Plots")
    created = 0
    for kind, plots in (("available", AVAILABLE_PLOTS), ("occupied", OCCUPIED_PLOTS)):
        for plot in plots:
            row = api(client, "POST", f"/api/map/sessions/{session_id}/plots/{kind}", json=plot)
            if row:
                created += 1
                print(f"  + {kind:<9} {row['Permit']}  ({row['lat']:.5f}, {row['lng']:.5f})")
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo plots into a running gravemap backend")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Backend base URL (default: {DEFAULT_BASE_URL})",
    )
    args = parser.parse_args()

    print("Grave Map Demo Plot Seeder")
    print(f"Target: {args.base_url}")

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        try:
            health = api(client, "GET", "/health")
        except httpx.ConnectError:
            print(f"\nERROR: Cannot connect to {args.base_url}")
            print("  python3 -m gravemap.web --port 8080")
            sys.exit(1)
        if not health:
            print("\nERROR: Backend is not responding.")
            sys.exit(1)
        print(f"Backend: {health.get('status', 'unknown')} (v{health.get('version', '?')})")

        session = api(client, "POST", "/api/map/sessions")
        if not session:
            sys.exit(1)
        session_id = session["session_id"]
        created = seed_plots(client, session_id)

        section("Summary")
        summary = api(client, "GET", f"/api/map/sessions/{session_id}/summary") or {}
        print(f"  Created:   {created}")
        print(f"  Occupied:  {summary.get('occupied', 'N/A')}")
        print(f"  Available: {summary.get('available', 'N/A')}")
        client.delete(f"/api/map/sessions/{session_id}")


if __name__ == "__main__":
    main()
