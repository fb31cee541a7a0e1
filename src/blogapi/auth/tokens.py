# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from itsdangerous import BadSignature, BadTimeSignature, SignatureExpired, URLSafeTimedSerializer

from blogapi.core.errors import ForbiddenError, UnauthenticatedError


class TokenIssuer:
    """Signs and verifies access tokens bound to a user id.

    ``max_age`` is in seconds; ``None`` disables expiry.
    """

    def __init__(self, secret_key: str, *, salt: str = "blogapi.token.v1", max_age: Optional[int] = None):
        if not secret_key:
            raise RuntimeError("Missing BLOG_SECRET_KEY (or SECRET_KEY) in environment")
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=salt)
        self.max_age = max_age

    def issue(self, user_id: str) -> str:
        return self._serializer.dumps({"id": str(user_id)})

    def verify(self, token: Optional[str]) -> str:
        if not token:
            raise UnauthenticatedError("No access token")
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as e:
            raise ForbiddenError("Access token has expired") from e
        except (BadSignature, BadTimeSignature) as e:
            raise ForbiddenError("Access token is invalid") from e
        user_id = str((data or {}).get("id") or "").strip() if isinstance(data, dict) else ""
        if not user_id:
            raise ForbiddenError("Access token is invalid")
        return user_id
