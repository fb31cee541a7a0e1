# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from blogapi.auth.tokens import TokenIssuer
from blogapi.config import Settings, load_settings
from blogapi.core.errors import BlogApiError, DependencyError
from blogapi.infra.provider import FirebaseTokenVerifier, ProviderVerifier
from blogapi.infra.repo import MemoryRepository, Repository
from blogapi.infra.uploads import S3UploadUrlIssuer, UploadUrlIssuer
from blogapi.logs import setup_logging
from blogapi.permissions import CurrentUser, require_user
from blogapi.services import blog_service, identity_service

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    repo: Repository
    tokens: TokenIssuer
    verifier: Optional[ProviderVerifier] = None
    uploads: Optional[UploadUrlIssuer] = None


class SignupRequest(BaseModel):
    fullname: str = ""
    email: str = ""
    password: str = ""


class SigninRequest(BaseModel):
    email: str = ""
    password: str = ""


class ProviderRequest(BaseModel):
    access_token: str = ""


class BlogRequest(BaseModel):
    title: str = ""
    des: str = ""
    banner: str = ""
    tags: List[str] = Field(default_factory=list)
    content: Dict[str, Any] = Field(default_factory=lambda: {"blocks": []})
    draft: bool = False


class SearchRequest(BaseModel):
    tag: str = ""


def build_services(
    settings: Settings,
    *,
    repo: Optional[Repository] = None,
    verifier: Optional[ProviderVerifier] = None,
    uploads: Optional[UploadUrlIssuer] = None,
) -> Services:
    if repo is None:
        if settings.mongo_url:
            from blogapi.infra.mongo_repo import MongoRepository

            repo = MongoRepository.connect(settings.mongo_url, settings.mongo_db)
        else:
            logger.warning("BLOG_MONGO_URL not set, using in-memory storage")
            repo = MemoryRepository()

    if verifier is None and settings.firebase_project_id:
        verifier = FirebaseTokenVerifier(settings.firebase_project_id, timeout=settings.jwks_timeout)
    if uploads is None and settings.upload_bucket:
        uploads = S3UploadUrlIssuer(
            settings.upload_bucket, region=settings.upload_region, expires=settings.upload_expires
        )

    tokens = TokenIssuer(settings.secret_key, salt=settings.token_salt, max_age=settings.token_max_age)
    return Services(settings=settings, repo=repo, tokens=tokens, verifier=verifier, uploads=uploads)


def request_error_message(exc: RequestValidationError) -> str:
    """First body error as "field: reason"."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p != "body"]
    msg = str(first.get("msg") or "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def _services(request: Request) -> Services:
    return request.app.state.services


def create_app(
    settings: Optional[Settings] = None,
    *,
    repo: Optional[Repository] = None,
    verifier: Optional[ProviderVerifier] = None,
    uploads: Optional[UploadUrlIssuer] = None,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="blogapi")
    app.state.services = build_services(settings, repo=repo, verifier=verifier, uploads=uploads)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BlogApiError)
    async def _blog_api_error(request: Request, exc: BlogApiError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": request_error_message(exc)})

    @app.post("/signup")
    def signup(payload: SignupRequest, svc: Services = Depends(_services)):
        return identity_service.signup(
            repo=svc.repo,
            tokens=svc.tokens,
            fullname=payload.fullname,
            email=payload.email,
            password=payload.password,
        )

    @app.post("/signin")
    def signin(payload: SigninRequest, svc: Services = Depends(_services)):
        return identity_service.signin(
            repo=svc.repo, tokens=svc.tokens, email=payload.email, password=payload.password
        )

    @app.post("/google-auth")
    def google_auth(payload: ProviderRequest, svc: Services = Depends(_services)):
        if svc.verifier is None:
            raise DependencyError("Google sign-in is not configured")
        return identity_service.provider_signin(
            repo=svc.repo, tokens=svc.tokens, verifier=svc.verifier, provider_token=payload.access_token
        )

    @app.get("/get-upload-url")
    def get_upload_url(svc: Services = Depends(_services)):
        if svc.uploads is None:
            raise DependencyError("Image uploads are not configured")
        return {"uploadURL": svc.uploads.upload_url()}

    @app.get("/latest-blogs")
    def latest_blogs(svc: Services = Depends(_services)):
        return {"blogs": blog_service.latest_blogs(repo=svc.repo)}

    @app.get("/trending-blogs")
    def trending_blogs(svc: Services = Depends(_services)):
        return {"blogs": blog_service.trending_blogs(repo=svc.repo)}

    @app.post("/search-blogs")
    def search_blogs(payload: SearchRequest, svc: Services = Depends(_services)):
        return {"blogs": blog_service.search_blogs(repo=svc.repo, tag=payload.tag)}

    @app.post("/create-blog")
    def create_blog(
        payload: BlogRequest,
        user: CurrentUser = Depends(require_user),
        svc: Services = Depends(_services),
    ):
        blog_id = blog_service.create_blog(
            repo=svc.repo,
            author_id=user.id,
            title=payload.title,
            des=payload.des,
            banner=payload.banner,
            tags=payload.tags,
            content=payload.content,
            draft=payload.draft,
        )
        return {"id": blog_id}

    return app
