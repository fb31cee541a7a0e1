# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Human-readable unique handles: usernames and blog slugs.

Both use the same strategy: derive a base from user input, and if it is
taken, append a short random suffix. Only a few suffixed candidates are
checked; the last one is accepted as-is and the store's unique index is
the final guard.
"""

from __future__ import annotations

import re
import secrets
import string
from typing import Callable

ALPHABET = string.ascii_letters + string.digits
USERNAME_SUFFIX_LEN = 5
SLUG_SUFFIX_LEN = 12
MAX_SUFFIX_ATTEMPTS = 3


def random_suffix(length: int) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def email_local_part(email: str) -> str:
    return str(email or "").split("@")[0]


def allocate_username(email: str, exists: Callable[[str], bool]) -> str:
    """Return a username derived from the email local-part.

    ``exists`` is asked whether a candidate is already taken.
    """
    base = email_local_part(email)
    if not exists(base):
        return base

    candidate = base + random_suffix(USERNAME_SUFFIX_LEN)
    for _ in range(MAX_SUFFIX_ATTEMPTS - 1):
        if not exists(candidate):
            break
        candidate = base + random_suffix(USERNAME_SUFFIX_LEN)
    return candidate


def slug_base(title: str) -> str:
    """'Hello, World!' -> 'Hello-World'"""
    s = re.sub(r"[^a-zA-Z0-9]", " ", str(title or "")).strip()
    return re.sub(r"\s+", "-", s)


def make_slug(title: str, exists: Callable[[str], bool]) -> str:
    base = slug_base(title)

    def _candidate() -> str:
        suffix = random_suffix(SLUG_SUFFIX_LEN)
        return f"{base}-{suffix}" if base else suffix

    candidate = _candidate()
    for _ in range(MAX_SUFFIX_ATTEMPTS - 1):
        if not exists(candidate):
            break
        candidate = _candidate()
    return candidate
