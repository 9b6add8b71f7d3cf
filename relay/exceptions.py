"""
Custom exceptions for the relay, providing a structured error hierarchy.
"""


class RelayBaseException(Exception):
    """Base exception for all custom exceptions in this relay."""

    pass


class ConfigurationError(RelayBaseException):
    """Raised for errors in relay configuration, like missing keys or invalid values."""

    pass


class APIError(RelayBaseException):
    """Raised for errors related to external API interactions (language model, image search)."""

    pass


class InferenceError(RelayBaseException):
    """Raised when the language model returns no usable text."""

    pass


class TransportError(RelayBaseException):
    """Raised when a message cannot be delivered over the transport session."""

    pass
