# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error kinds raised by services and rendered by the HTTP layer."""

from __future__ import annotations


class BlogApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlogApiError):
    """Malformed input. Never retried."""

    status_code = 400


class ConflictError(BlogApiError):
    """A unique field (email, username, blog_id) is already taken."""

    status_code = 409

    def __init__(self, message: str, *, field: str = ""):
        super().__init__(message)
        self.field = field


class AuthError(BlogApiError):
    status_code = 403


class UnauthenticatedError(AuthError):
    status_code = 401


class ForbiddenError(AuthError):
    status_code = 403


class DependencyError(BlogApiError):
    """Storage, provider or hashing failure."""

    status_code = 500
