"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

Stats query pipeline.

Interprets a request, resolves stat names against the registry and encodes
the result as plain text, JSON or push-monitoring datapoints.
"""

from statsview.stats.dispatcher import (
    HandlerState,
    StatsRequestHandler,
    StatsResponse,
    handle_stats_request,
)
from statsview.stats.formatters import (
    MonitorDatapoint,
    ProcessIdentity,
    format_json,
    format_monitor,
    format_plain,
)
from statsview.stats.query import (
    OutputFormat,
    RequestIntent,
    RequestMethod,
    interpret_request,
)
from statsview.stats.resolver import MetricSample, resolve_samples

__all__ = [
    "HandlerState",
    "MetricSample",
    "MonitorDatapoint",
    "OutputFormat",
    "ProcessIdentity",
    "RequestIntent",
    "RequestMethod",
    "StatsRequestHandler",
    "StatsResponse",
    "format_json",
    "format_monitor",
    "format_plain",
    "handle_stats_request",
    "interpret_request",
    "resolve_samples",
]
