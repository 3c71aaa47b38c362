"""
Registry-related exceptions

Provides a hierarchy of exceptions for the ways a registry call can fail,
so callers can branch on the failure category without inspecting messages.
"""

from typing import Optional


class RegistryError(Exception):
    """Base exception for registry operations"""

    pass


class InvalidAddressError(RegistryError):
    """Connection string could not be parsed into a registry address"""

    pass


class RegistryConnectionError(RegistryError):
    """Dialing the registry or talking to it over the transport failed"""

    pass


class LikelyTLSMismatchError(RegistryConnectionError):
    """
    Connection failed in a way that suggests a plaintext client talking
    to a TLS-only registry.

    This is a best-effort guess derived from the underlying error message.
    """

    pass


class NotFoundError(RegistryError):
    """Registry answered 404 Not Found"""

    pass


class RequestFailedError(RegistryError):
    """Registry answered with a 4xx/5xx status other than 404"""

    def __init__(self, message: str, status_code: int, reason: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class MalformedResponseError(RegistryError):
    """Response body did not match the documented shape"""

    pass
