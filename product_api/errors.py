"""
Error types for the product API client.

Two tiers:
    - ValidationError is raised before any request is built. Bad input is a
      caller bug, so it fails fast.
    - Remote failures (server, network, setup) are never raised. They come
      back as a ResultEnvelope with success=False and a FailureKind.
"""

from enum import Enum


class ProductApiError(Exception):
    """Base class for errors raised by the product API client."""


class ValidationError(ProductApiError, ValueError):
    """Input rejected locally, before any network attempt."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class FailureKind(str, Enum):
    SERVER = "server"
    NETWORK = "network"
    SETUP = "setup"
