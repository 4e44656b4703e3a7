"""Custom exceptions used across SheetFlow."""


class SheetFlowError(Exception):
    """Base error for the library."""


class ConfigError(SheetFlowError):
    """Configuration related error."""


class PropertyResolutionError(ConfigError, LookupError):
    """Raised when a property expression references an unknown member."""


class InvalidPropertyExpressionError(ConfigError, TypeError):
    """Raised when a property expression does not access exactly one member."""


class ProfileValidationError(ConfigError):
    """Raised when a YAML configuration profile fails validation."""
