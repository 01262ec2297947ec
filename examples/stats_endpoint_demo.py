#!/usr/bin/env python3
"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

Demonstration of the Statsview stats endpoint.

This example shows how to:
1. Initialize the stats registry and register stats
2. Update stats while the service is running
3. Query the /stats endpoint in plain, JSON and monitor formats
"""

import requests

from statsview.logging_config import setup_logging
from statsview.monitoring.http_server import StatsWebServer
from statsview.monitoring.metrics import initialize_stats_registry


def register_stats(registry):
    """Register and populate a few stats."""
    print("\n=== Registering Stats ===")

    for name in ("num_queries", "num_slow_queries", "query_latency_us"):
        registry.register_stat(name)
        print(f"✓ Registered {name}")

    registry.add_value("num_queries", 128)
    registry.add_value("num_slow_queries", 3)
    registry.set_value("query_latency_us", 1750)
    print("✓ Recorded values")


def query(url, **params):
    """Fetch stats and print the body."""
    response = requests.get(url, params=params, timeout=5)
    print(f"\nGET {response.url} -> {response.status_code}")
    print(response.text)


def main():
    setup_logging(level="WARNING", json_format=False)

    registry = initialize_stats_registry()
    register_stats(registry)

    server = StatsWebServer(host="127.0.0.1", port=0, local_ip="127.0.0.1", role="graph",
                            stats_registry=registry)
    server.start()

    try:
        url = server.get_url()
        print("\n=== Querying Stats ===")
        query(url)
        query(url, stats="num_queries,missing")
        query(url, format="json", stats="num_slow_queries")
        query(url, format="monitor")

        response = requests.post(url, timeout=5)
        print(f"\nPOST {url} -> {response.status_code} {response.reason}")
    finally:
        server.stop()


if __name__ == "__main__":
    main()
