"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

Statsview - HTTP query endpoint for process-internal counters and gauges

Statsview exposes named stats over HTTP with on-demand selection of
specific stats and plain text, JSON and push-monitoring output encodings.
"""

from statsview._version import __version__

__all__ = ["__version__"]
