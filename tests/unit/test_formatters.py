"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

Unit tests for stats response encoders.
"""

import json
from unittest.mock import MagicMock

import pytest

from statsview.exceptions import IdentityValidationError
from statsview.stats.formatters import (
    ProcessIdentity,
    build_common_tags,
    format_json,
    format_monitor,
    format_plain,
    report_timestamp,
    resolve_report_host,
)
from statsview.stats.resolver import MetricSample

# 1699999980 is a multiple of 60
WINDOW_START = 1699999980


@pytest.fixture
def samples():
    return [
        MetricSample.of_value("cpu", 42),
        MetricSample.of_error("missing", "Stats not found: missing"),
    ]


class TestFormatPlain:
    """Test the plain text encoder."""
    
    def test_value_and_error_lines(self, samples):
        assert format_plain(samples) == "cpu=42\nmissing=Stats not found: missing\n"
    
    def test_empty(self):
        assert format_plain([]) == ""
    
    def test_lines_split_back_into_pairs(self):
        """Test each line splits on the first = into the original pair."""
        samples = [
            MetricSample.of_value("a", 1),
            MetricSample.of_value("b", -5),
            MetricSample.of_error("c", "Stats not found: c"),
        ]
        
        lines = format_plain(samples).splitlines()
        pairs = [tuple(line.split("=", 1)) for line in lines]
        
        assert pairs == [("a", "1"), ("b", "-5"), ("c", "Stats not found: c")]


class TestFormatJson:
    """Test the JSON encoder."""
    
    def test_single_key_objects_in_order(self, samples):
        decoded = json.loads(format_json(samples))
        
        assert decoded == [{"cpu": 42}, {"missing": "Stats not found: missing"}]
    
    def test_empty(self):
        assert format_json([]) == "[]"
    
    def test_is_pretty_printed(self):
        body = format_json([MetricSample.of_value("cpu", 42)])
        assert body == '[\n  {\n    "cpu": 42\n  }\n]'


class TestReportTimestamp:
    """Test monitoring step bucketing."""
    
    def test_rounds_down_to_minute(self):
        assert report_timestamp(WINDOW_START) == WINDOW_START
        assert report_timestamp(WINDOW_START + 59) == WINDOW_START
        assert report_timestamp(WINDOW_START + 60) == WINDOW_START + 60


class TestResolveReportHost:
    """Test choosing the reported host."""
    
    def test_uses_hostname_without_local_ip(self):
        validator = MagicMock()
        identity = ProcessIdentity(local_ip="", port=11000, role="graph")
        
        host = resolve_report_host(identity, lambda: "node-1", validator)
        
        assert host == "node-1"
        validator.assert_not_called()
    
    def test_validates_local_ip(self):
        validator = MagicMock()
        identity = ProcessIdentity(local_ip="10.1.2.3", port=11000, role="graph")
        
        assert resolve_report_host(identity, lambda: "unused", validator) == "10.1.2.3"
        validator.assert_called_once_with("10.1.2.3")
    
    def test_validation_failure_propagates(self):
        identity = ProcessIdentity(local_ip="bad ip", port=11000, role="graph")
        
        with pytest.raises(IdentityValidationError):
            resolve_report_host(identity)


class TestFormatMonitor:
    """Test the push-monitoring encoder."""
    
    def test_datapoint_layout(self, identity):
        body = format_monitor([MetricSample.of_value("cpu", 42)], identity, now=WINDOW_START + 45)
        
        expected_tags = "project=nebula,city=jd,ip_port=10.0.0.5:11000,module=storage,type=cpu"
        assert body == (
            '[{"counterType":"GAUGE","endpoint":"10.0.0.5:11000","metric":"pv",'
            f'"step":60,"tags":"{expected_tags}","timestamp":{WINDOW_START},"value":42}}]'
        )
    
    def test_one_datapoint_per_value_sample(self, identity):
        samples = [MetricSample.of_value(name, i) for i, name in enumerate(["a", "b", "c"])]
        
        datapoints = json.loads(format_monitor(samples, identity, now=WINDOW_START))
        
        assert [d["value"] for d in datapoints] == [0, 1, 2]
        assert [d["tags"].rsplit(",type=", 1)[1] for d in datapoints] == ["a", "b", "c"]
        assert {d["endpoint"] for d in datapoints} == {"10.0.0.5:11000"}
    
    def test_error_samples_are_omitted(self, identity, samples):
        datapoints = json.loads(format_monitor(samples, identity, now=WINDOW_START))
        
        assert len(datapoints) == 1
        assert datapoints[0]["tags"].endswith(",type=cpu")
    
    def test_empty_samples(self, identity):
        assert format_monitor([], identity, now=WINDOW_START) == "[]"
    
    def test_hostname_used_without_local_ip(self):
        identity = ProcessIdentity(local_ip="", port=9669, role="graph")
        
        datapoints = json.loads(format_monitor(
            [MetricSample.of_value("cpu", 1)],
            identity,
            now=WINDOW_START,
            hostname_getter=lambda: "graphd-0",
        ))
        
        assert datapoints[0]["endpoint"] == "graphd-0:9669"
        assert "ip_port=graphd-0:9669,module=graph" in datapoints[0]["tags"]
    
    def test_invalid_local_ip_returns_message(self):
        """Test validation failure replaces the whole body."""
        identity = ProcessIdentity(local_ip="bad ip", port=11000, role="storage")
        
        body = format_monitor([MetricSample.of_value("cpu", 1)], identity, now=WINDOW_START)
        
        assert body == "Bad host or ip format: bad ip"
    
    def test_same_window_same_timestamp(self, identity):
        sample = [MetricSample.of_value("cpu", 1)]
        
        first = json.loads(format_monitor(sample, identity, now=WINDOW_START + 1))
        second = json.loads(format_monitor(sample, identity, now=WINDOW_START + 59))
        
        assert first[0]["timestamp"] == second[0]["timestamp"] == WINDOW_START
    
    def test_crossing_window_differs_by_step(self, identity):
        sample = [MetricSample.of_value("cpu", 1)]
        
        before = json.loads(format_monitor(sample, identity, now=WINDOW_START + 59))
        after = json.loads(format_monitor(sample, identity, now=WINDOW_START + 60))
        
        assert after[0]["timestamp"] - before[0]["timestamp"] == 60
    
    def test_input_is_not_mutated(self, identity, samples):
        snapshot = list(samples)
        format_monitor(samples, identity, now=WINDOW_START)
        assert samples == snapshot
    
    def test_common_tags(self):
        assert build_common_tags("h:1", "meta") == "project=nebula,city=jd,ip_port=h:1,module=meta"
