# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime settings.

Values come from environment variables and may be overlaid by a YAML file
(``BLOG_CONFIG`` or an explicit path). Keys in the YAML file are the field
names of :class:`Settings`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

_TRUE = {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    secret_key: str = ""
    token_salt: str = "blogapi.token.v1"
    token_max_age: Optional[int] = None  # None -> tokens never expire
    mongo_url: str = ""
    mongo_db: str = "blogapi"
    firebase_project_id: str = ""
    jwks_timeout: int = 10
    upload_bucket: str = ""
    upload_region: str = "ap-south-1"
    upload_expires: int = 1000
    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


def _opt_int(v: Optional[str]) -> Optional[int]:
    s = str(v or "").strip()
    if not s or s.lower() in {"none", "0"}:
        return None
    return int(s)


def _from_env() -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "secret_key": os.getenv("BLOG_SECRET_KEY") or os.getenv("SECRET_KEY") or "",
        "token_salt": os.getenv("BLOG_TOKEN_SALT", Settings.token_salt),
        "token_max_age": _opt_int(os.getenv("BLOG_TOKEN_MAX_AGE")),
        "mongo_url": os.getenv("BLOG_MONGO_URL", ""),
        "mongo_db": os.getenv("BLOG_MONGO_DB", Settings.mongo_db),
        "firebase_project_id": os.getenv("BLOG_FIREBASE_PROJECT_ID", ""),
        "jwks_timeout": int(os.getenv("BLOG_JWKS_TIMEOUT", str(Settings.jwks_timeout))),
        "upload_bucket": os.getenv("BLOG_UPLOAD_BUCKET", ""),
        "upload_region": os.getenv("BLOG_UPLOAD_REGION", Settings.upload_region),
        "upload_expires": int(os.getenv("BLOG_UPLOAD_EXPIRES", str(Settings.upload_expires))),
        "log_level": os.getenv("BLOG_LOG_LEVEL", Settings.log_level),
        "host": os.getenv("BLOG_HOST", Settings.host),
        "port": int(os.getenv("BLOG_PORT", str(Settings.port))),
        "reload": os.getenv("BLOG_RELOAD", "false").lower() in _TRUE,
    }
    origins = os.getenv("BLOG_CORS_ORIGINS", "")
    if origins.strip():
        out["cors_origins"] = tuple(o.strip() for o in origins.split(",") if o.strip())
    return out


def _from_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise RuntimeError(f"Config file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise RuntimeError(f"Config file must contain a mapping: {path}")
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise RuntimeError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    out = dict(raw)
    if "cors_origins" in out:
        co = out["cors_origins"]
        out["cors_origins"] = (co,) if isinstance(co, str) else tuple(co or ())
    return out


def load_settings(path: Optional[str] = None) -> Settings:
    values = _from_env()
    cfg = path or os.getenv("BLOG_CONFIG")
    if cfg:
        values.update(_from_yaml(Path(cfg).resolve()))
    return Settings(**values)

