# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Verification of Firebase (Google sign-in) ID tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from blogapi.core.errors import AuthError, DependencyError

logger = logging.getLogger(__name__)

FIREBASE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)
DEFAULT_TIMEOUT = 10

PROVIDER_FAILED = "Failed to authenticate you with Google. Try with some other Google account"


@dataclass(frozen=True)
class ProviderClaims:
    email: str
    name: str
    picture: str


class ProviderVerifier(Protocol):
    def verify(self, token: str) -> ProviderClaims: ...


class FirebaseTokenVerifier:
    def __init__(self, project_id: str, *, jwks_url: str = FIREBASE_JWKS_URL, timeout: int = DEFAULT_TIMEOUT):
        if not project_id:
            raise RuntimeError("Missing BLOG_FIREBASE_PROJECT_ID in environment")
        self.project_id = project_id
        self.jwks_url = jwks_url
        self.timeout = timeout

    def verify(self, token: str) -> ProviderClaims:
        if not token:
            raise AuthError(PROVIDER_FAILED)
        try:
            payload = self.decode_token(token)
        except ExpiredSignatureError as e:
            raise AuthError("Google token has expired") from e
        except JWTError as e:
            logger.info("Rejected provider token: %s", e)
            raise AuthError(PROVIDER_FAILED) from e

        email = payload.get("email")
        if not email:
            raise AuthError("Google token missing email claim")
        return ProviderClaims(
            email=str(email),
            name=str(payload.get("name") or ""),
            picture=str(payload.get("picture") or ""),
        )

    def decode_token(self, token: str) -> Dict[str, Any]:
        unverified_header = jwt.get_unverified_header(token)
        key = self._find_key(unverified_header.get("kid"))
        if not key:
            raise JWTError("Matching signing key not found in JWKS")

        return jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=self.project_id,
            issuer=f"https://securetoken.google.com/{self.project_id}",
            options={"verify_at_hash": False},
        )

    def _find_key(self, kid: Optional[str]) -> Optional[Dict[str, Any]]:
        try:
            resp = requests.get(self.jwks_url, timeout=self.timeout)
            resp.raise_for_status()
            jwks = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Unable to fetch JWKS keys: %s", e)
            raise DependencyError("Unable to fetch Google signing keys") from e

        return next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
