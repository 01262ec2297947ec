"""
Query interpretation for the stats endpoint.

Turns an HTTP method and query parameters into a RequestIntent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence, Tuple, Union


class RequestMethod(str, Enum):
    """Methods the stats endpoint distinguishes."""
    GET = "GET"
    OTHER = "OTHER"


class OutputFormat(str, Enum):
    """Response body encodings."""
    PLAIN = "plain"
    JSON = "json"
    MONITOR = "monitor"


FORMAT_PARAM = "format"
STATS_PARAM = "stats"

QueryParams = Mapping[str, Union[str, Sequence[str]]]


@dataclass(frozen=True)
class RequestIntent:
    """
    Parsed form of a single stats request.

    An empty ``metric_filter`` means every registered stat.
    """
    method: RequestMethod = RequestMethod.GET
    output_format: OutputFormat = OutputFormat.PLAIN
    metric_filter: Tuple[str, ...] = ()

    @property
    def is_supported(self) -> bool:
        return self.method is RequestMethod.GET


def _first(value: Union[str, Sequence[str]]) -> str:
    # parse_qs yields lists; plain mappings yield strings
    if isinstance(value, str):
        return value
    return value[0] if value else ""


def parse_output_format(value: str) -> OutputFormat:
    """Map a ``format`` value to an OutputFormat; unknown values fall back to plain."""
    if value == "json":
        return OutputFormat.JSON
    if value == "monitor":
        return OutputFormat.MONITOR
    return OutputFormat.PLAIN


def split_stat_names(value: str) -> Tuple[str, ...]:
    """Split a comma separated ``stats`` value, dropping empty names."""
    return tuple(name for name in value.split(",") if name)


def interpret_request(method: str, params: QueryParams) -> RequestIntent:
    """
    Build the intent of a stats request.

    Non-GET requests get ``RequestMethod.OTHER`` and default values for every
    other field; their parameters are not looked at.

    Args:
        method: HTTP method
        params: Query parameters, either ``{name: value}`` or ``parse_qs`` output

    Returns:
        RequestIntent for the request
    """
    if method.upper() != RequestMethod.GET.value:
        return RequestIntent(method=RequestMethod.OTHER)

    output_format = OutputFormat.PLAIN
    if FORMAT_PARAM in params:
        output_format = parse_output_format(_first(params[FORMAT_PARAM]))

    metric_filter: Tuple[str, ...] = ()
    if STATS_PARAM in params:
        metric_filter = split_stat_names(_first(params[STATS_PARAM]))

    return RequestIntent(
        method=RequestMethod.GET,
        output_format=output_format,
        metric_filter=metric_filter,
    )
