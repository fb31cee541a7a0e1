# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Signup, signin and provider signin.

All three entry paths end in the same response shape (``auth_payload``).
Failures raise ``blogapi.core.errors`` exceptions; nothing is retried.
"""

from __future__ import annotations

import logging
import re
from typing import Dict

from blogapi.auth.passwords import hash_password, verify_password
from blogapi.auth.tokens import TokenIssuer
from blogapi.core.errors import AuthError, ValidationError
from blogapi.core.handles import allocate_username
from blogapi.core.models import PersonalInfo, UserRecord
from blogapi.infra.provider import ProviderVerifier
from blogapi.infra.repo import Repository

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+", re.ASCII)
PASSWORD_RE = re.compile(r"(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).{6,20}", re.ASCII)

MSG_NOT_REGISTERED = "Email is not registered"
MSG_BAD_PASSWORD = "Password is incorrect"
MSG_USE_GOOGLE = "Account was created using Google. Try logging in with Google"
MSG_USE_PASSWORD = "This email was signed up without Google. Please log in with password to access the account"


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def hd_avatar(picture: str) -> str:
    """Google serves 96px avatars by default; ask for 384px."""
    return str(picture or "").replace("s96-c", "s384-c")


def auth_payload(user: UserRecord, tokens: TokenIssuer) -> Dict[str, str]:
    return {
        "access_token": tokens.issue(user.id),
        "profile_img": user.personal_info.profile_img,
        "username": user.personal_info.username,
        "fullname": user.personal_info.fullname,
    }


def validate_signup(*, fullname: str, email: str, password: str) -> None:
    if not fullname or len(fullname) < 3:
        raise ValidationError("Fullname must be at least 3 characters long")
    if not email:
        raise ValidationError("Enter email")
    if not EMAIL_RE.fullmatch(email):
        raise ValidationError("Email is invalid")
    if not PASSWORD_RE.fullmatch(password or ""):
        raise ValidationError(
            "Password must be 6 to 20 characters long, with at least 1 number, "
            "1 lowercase and 1 uppercase letter"
        )


def signup(*, repo: Repository, tokens: TokenIssuer, fullname: str, email: str, password: str) -> Dict[str, str]:
    fullname = str(fullname or "").strip()
    email = normalize_email(email)
    validate_signup(fullname=fullname, email=email, password=password)

    hashed = hash_password(password)
    username = allocate_username(email, repo.username_exists)

    # Duplicate emails surface here as ConflictError from the unique index.
    user = repo.insert_user(
        UserRecord(personal_info=PersonalInfo(fullname=fullname, email=email, username=username, password=hashed))
    )
    logger.info("New account '%s'", user.personal_info.username)
    return auth_payload(user, tokens)


def signin(*, repo: Repository, tokens: TokenIssuer, email: str, password: str) -> Dict[str, str]:
    user = repo.find_user_by_email(normalize_email(email))
    if user is None:
        raise AuthError(MSG_NOT_REGISTERED)
    if user.google_auth:
        raise AuthError(MSG_USE_GOOGLE)
    if not verify_password(user.personal_info.password or "", password):
        raise AuthError(MSG_BAD_PASSWORD)
    return auth_payload(user, tokens)


def provider_signin(
    *, repo: Repository, tokens: TokenIssuer, verifier: ProviderVerifier, provider_token: str
) -> Dict[str, str]:
    claims = verifier.verify(provider_token)
    email = normalize_email(claims.email)

    user = repo.find_user_by_email(email)
    if user is not None:
        if not user.google_auth:
            raise AuthError(MSG_USE_PASSWORD)
        return auth_payload(user, tokens)

    username = allocate_username(email, repo.username_exists)
    user = repo.insert_user(
        UserRecord(
            personal_info=PersonalInfo(
                fullname=claims.name or username,
                email=email,
                username=username,
                profile_img=hd_avatar(claims.picture),
            ),
            google_auth=True,
        )
    )
    logger.info("New Google account '%s'", user.personal_info.username)
    return auth_payload(user, tokens)
