"""
lightbearer.services.errors — Business-rule failures
=====================================================

Services raise these instead of returning sentinel values; the API layer
turns them into ``{"error": message}`` bodies with the matching status
(see :mod:`lightbearer.api.errors`).
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Missing or malformed input."""

    status_code = 400


class UnauthorizedError(ServiceError):
    """Credential missing, unknown or revoked."""

    status_code = 401


class ForbiddenError(ServiceError):
    """Caller is authenticated but doesn't own the row."""

    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404
