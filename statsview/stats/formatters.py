"""
Response body encoders for the stats endpoint.

Three encodings are supported:
- plain: one ``name=value`` line per stat
- json: pretty-printed array of single-key objects
- monitor: compact JSON array of push-monitoring datapoints

None of the encoders mutate their input. The monitor encoder additionally
depends on wall-clock time and on the identity of this process.
"""

import json
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from statsview.exceptions import IdentityValidationError
from statsview.logging_config import get_logger
from statsview.network import get_hostname, validate_host_or_ip
from statsview.stats.resolver import MetricSample

logger = get_logger(__name__)

# Push-monitoring protocol constants
MONITOR_STEP = 60
MONITOR_COUNTER_TYPE = "GAUGE"
MONITOR_METRIC = "pv"
MONITOR_PROJECT = "nebula"
MONITOR_CITY = "jd"


@dataclass(frozen=True)
class ProcessIdentity:
    """
    Identity this process reports in monitor output.

    Attributes:
        local_ip: Advertised host or IP; empty means use the machine hostname
        port: Service port
        role: Role name of the service (e.g. "graph", "storage", "meta")
    """
    local_ip: str
    port: int
    role: str


@dataclass(frozen=True)
class MonitorDatapoint:
    """A single push-monitoring datapoint."""
    endpoint: str
    step: int
    counterType: str
    timestamp: int
    metric: str
    value: int
    tags: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def format_plain(samples: Sequence[MetricSample]) -> str:
    """Encode samples as newline-terminated ``name=value`` lines."""
    return "".join(f"{sample.name}={sample.display_value()}\n" for sample in samples)


def format_json(samples: Sequence[MetricSample]) -> str:
    """Encode samples as a pretty-printed JSON array of ``{name: value}`` objects."""
    return json.dumps(
        [{sample.name: sample.display_value()} for sample in samples],
        indent=2,
    )


def report_timestamp(now: int) -> int:
    """Round a Unix timestamp down to the start of its monitoring step."""
    return now - now % MONITOR_STEP


def resolve_report_host(
    identity: ProcessIdentity,
    hostname_getter: Callable[[], str] = get_hostname,
    validator: Callable[[str], None] = validate_host_or_ip,
) -> str:
    """
    Pick the host this process reports as.

    Raises:
        IdentityValidationError: If the configured local IP is invalid
    """
    if not identity.local_ip:
        return hostname_getter()
    validator(identity.local_ip)
    return identity.local_ip


def build_common_tags(endpoint: str, role: str) -> str:
    return (
        f"project={MONITOR_PROJECT},city={MONITOR_CITY}"
        f",ip_port={endpoint},module={role}"
    )


def build_datapoints(
    samples: Sequence[MetricSample],
    endpoint: str,
    role: str,
    timestamp: int,
) -> List[MonitorDatapoint]:
    """
    Build one datapoint per successfully resolved sample.

    Samples whose lookup failed carry no number and are left out.
    """
    common_tags = build_common_tags(endpoint, role)
    datapoints = []
    for sample in samples:
        if sample.is_error:
            logger.warning(
                "monitor_sample_skipped",
                stat=sample.name,
                reason=sample.error,
            )
            continue
        datapoints.append(MonitorDatapoint(
            endpoint=endpoint,
            step=MONITOR_STEP,
            counterType=MONITOR_COUNTER_TYPE,
            timestamp=timestamp,
            metric=MONITOR_METRIC,
            value=sample.value,
            tags=f"{common_tags},type={sample.name}",
        ))
    return datapoints


def format_monitor(
    samples: Sequence[MetricSample],
    identity: ProcessIdentity,
    now: Optional[int] = None,
    hostname_getter: Callable[[], str] = get_hostname,
    validator: Callable[[str], None] = validate_host_or_ip,
) -> str:
    """
    Encode samples in the push-monitoring wire format.

    If the configured local IP fails validation, the validation message is
    returned as the whole body and no datapoints are produced.

    Args:
        samples: Resolved samples
        identity: Identity of this process
        now: Unix time to report at (defaults to the current time)
        hostname_getter: Resolves the machine hostname when no local IP is set
        validator: Validates a configured local IP

    Returns:
        Compact JSON array of datapoints, or the validation failure message
    """
    if now is None:
        now = int(time.time())

    try:
        host = resolve_report_host(identity, hostname_getter, validator)
    except IdentityValidationError as e:
        logger.error(f"Invalid local ip for monitor output: {e}")
        return str(e)

    endpoint = f"{host}:{identity.port}"
    datapoints = build_datapoints(samples, endpoint, identity.role, report_timestamp(int(now)))

    return json.dumps(
        [datapoint.to_dict() for datapoint in datapoints],
        separators=(",", ":"),
        sort_keys=True,
    )
