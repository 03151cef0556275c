"""
API error taxonomy.

Services raise these; `main.py` turns them into `{"detail": ...}` responses.
"""

from __future__ import annotations


class AppError(RuntimeError):
    status_code = 500

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthError(AppError):
    status_code = 401


class ConflictError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class StorageError(AppError):
    status_code = 500


class PersistenceError(AppError):
    status_code = 500
