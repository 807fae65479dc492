"""Failure types raised by the discovery pipeline.

Every failure is terminal: the CLI reports it and exits non-zero without
printing a document.
"""

from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for all fatal discovery failures."""

    exit_code = 1

    def __init__(self, message: str, code: str = "error") -> None:
        super().__init__(message)
        self.code = code


class ConfigurationError(DiscoveryError):
    """Raised when invocation parameters or settings cannot be resolved."""

    exit_code = 2

    def __init__(self, message: str, code: str = "configuration") -> None:
        super().__init__(message, code)


class CredentialError(DiscoveryError):
    """Raised when assuming the discovery role fails."""


class RemoteCallError(DiscoveryError):
    """Raised when an RDS API call fails."""

    def __init__(
        self,
        operation: str,
        message: str,
        code: str = "remote_error",
    ) -> None:
        super().__init__(f"{operation} failed: {message}", code)
        self.operation = operation


class DataIntegrityError(DiscoveryError):
    """Raised when an instance lacks a field the output requires."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "data_integrity")


class OutputError(DiscoveryError):
    """Raised when the discovery document cannot be serialized or written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "output")
