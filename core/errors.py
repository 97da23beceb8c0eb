# core/errors.py
from __future__ import annotations


class CareerError(Exception):
    """Base for errors surfaced at the API boundary."""

    error_code = "INTERNAL"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.error_code)
        self.message = message or self.error_code


class Unauthorized(CareerError):
    error_code = "UNAUTHORIZED"
    status_code = 401


class ValidationError(CareerError):
    error_code = "VALIDATION"
    status_code = 400


class UpstreamServiceError(CareerError):
    error_code = "UPSTREAM"
    status_code = 502


class PersistenceError(CareerError):
    error_code = "PERSISTENCE"
    status_code = 500
