"""
Gahoi Sathi — Domain error taxonomy.

Services raise these; ``app.main`` maps every ``AppError`` to a JSON
response ``{"detail": message}`` carrying ``status_code``.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Bad input shape or length."""

    status_code = 400


class AuthenticationError(AppError):
    """Missing, unknown or expired session token."""

    status_code = 401


class AuthorizationError(AppError):
    """Caller is not entitled to the target resource."""

    status_code = 403


class NotFoundError(AppError):
    """Resource, or the precondition of a state transition, is missing."""

    status_code = 404


class ConflictError(AppError):
    """Duplicate resource, e.g. an existing interest for the same pair."""

    status_code = 409
