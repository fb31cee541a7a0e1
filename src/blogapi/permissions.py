# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request


@dataclass(frozen=True)
class CurrentUser:
    id: str


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    parts = header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def require_user(request: Request) -> CurrentUser:
    """Resolve the bearer token to a user id.

    No token -> 401; bad/tampered/expired token -> 403.
    """
    user_id = request.app.state.services.tokens.verify(bearer_token(request))
    return CurrentUser(id=user_id)
