"""
Network helpers for Statsview.

Resolves the identity this process reports to the monitoring pipeline.
"""

import ipaddress
import re
import socket

from statsview.exceptions import IdentityValidationError
from statsview.logging_config import get_logger

logger = get_logger(__name__)

# RFC 1123 hostname label
_HOSTNAME_LABEL = re.compile(r'^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$')


def get_hostname() -> str:
    """Return the network hostname of this machine."""
    return socket.gethostname()


def is_valid_hostname(host: str) -> bool:
    """
    Check that a string is a syntactically valid hostname.

    Args:
        host: Candidate hostname

    Returns:
        True if every dot-separated label is a valid RFC 1123 label
    """
    if not host or len(host) > 253:
        return False
    labels = host[:-1].split(".") if host.endswith(".") else host.split(".")
    return all(_HOSTNAME_LABEL.match(label) for label in labels)


def validate_host_or_ip(host: str) -> None:
    """
    Validate a configured host name or IP address.

    IP literals are accepted as-is. Host names must be well formed and
    resolvable.

    Args:
        host: Host name or IP address

    Raises:
        IdentityValidationError: If the value is malformed or does not resolve
    """
    try:
        ipaddress.ip_address(host)
        return
    except ValueError:
        pass

    if not is_valid_hostname(host):
        raise IdentityValidationError(f"Bad host or ip format: {host}")

    try:
        socket.getaddrinfo(host, None)
    except socket.gaierror as e:
        logger.warning(f"Failed to resolve host {host}: {e}")
        raise IdentityValidationError(f"Unable to resolve host: {host}") from e
