"""
Exception hierarchy for Statsview.

All custom exceptions inherit from StatsviewError base class.
"""


class StatsviewError(Exception):
    """Base exception for all Statsview errors."""
    pass


# Request Errors
class RequestError(StatsviewError):
    """Base exception for request handling errors."""
    pass


class UnsupportedMethodError(RequestError):
    """Raised when the stats endpoint receives a method other than GET."""
    
    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unsupported method: {method}")


# Registry Errors
class RegistryError(StatsviewError):
    """Base exception for stats registry errors."""
    pass


class StatNotFoundError(RegistryError):
    """Raised when a stat name is not registered."""
    
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Stats not found: {name}")


class InvalidStatNameError(RegistryError):
    """Raised when a stat name is malformed or already registered."""
    pass


# Identity Errors
class IdentityValidationError(StatsviewError):
    """Raised when the configured host or IP of this process is invalid."""
    pass


# Configuration Errors
class ConfigurationError(StatsviewError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid or malformed."""
    pass


class ConfigurationLoadError(ConfigurationError):
    """Raised when loading configuration fails."""
    pass
