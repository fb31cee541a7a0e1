# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from blogapi.core.errors import DependencyError, ValidationError
from blogapi.core.handles import make_slug
from blogapi.core.models import BlogRecord, UserRecord
from blogapi.infra.repo import LATEST, TRENDING, Repository

logger = logging.getLogger(__name__)

MAX_TAGS = 10
MAX_DES_LEN = 200
LIST_LIMIT = 5


def content_blocks(content: Any) -> List[Any]:
    if isinstance(content, dict):
        blocks = content.get("blocks")
        if isinstance(blocks, list):
            return blocks
    return []


def validate_blog(
    *,
    title: str,
    des: str,
    banner: str,
    tags: Sequence[str],
    content: Any,
    draft: bool,
) -> None:
    """Check a blog before saving.

    Drafts only need a title. Publishing checks, in order: description,
    banner, content blocks, tags. The first failing rule wins.
    """
    if not title:
        raise ValidationError("You must provide a title")
    if des and len(des) > MAX_DES_LEN:
        raise ValidationError(f"Blog description must be under {MAX_DES_LEN} characters")
    if draft:
        return

    if not des:
        raise ValidationError(f"You must provide a blog description under {MAX_DES_LEN} characters")
    if not banner:
        raise ValidationError("You must provide a banner to publish a blog")
    if not content_blocks(content):
        raise ValidationError("There must be some blog content to publish it")
    if not tags or len(tags) > MAX_TAGS:
        raise ValidationError(f"Provide tags in order to publish the blog, maximum {MAX_TAGS}")


def create_blog(
    *,
    repo: Repository,
    author_id: str,
    title: str,
    des: str = "",
    banner: str = "",
    tags: Optional[Sequence[str]] = None,
    content: Any = None,
    draft: bool = False,
) -> str:
    """Validate and store a blog. Returns its ``blog_id``."""
    title = str(title or "").strip()
    des = str(des or "").strip()
    banner = str(banner or "").strip()
    tags = [str(t).strip().lower() for t in (tags or []) if str(t).strip()]
    draft = bool(draft)

    validate_blog(title=title, des=des, banner=banner, tags=tags, content=content, draft=draft)

    blog = repo.insert_blog(
        BlogRecord(
            blog_id=make_slug(title, repo.blog_id_exists),
            title=title,
            author=author_id,
            des=des,
            banner=banner,
            content=content if isinstance(content, dict) else {"blocks": []},
            tags=tags,
            draft=draft,
        )
    )

    # The blog stays saved even if the author update fails.
    try:
        repo.record_publication(author_id, blog.id, increment=0 if draft else 1)
    except DependencyError as e:
        logger.error("Blog '%s' saved but author %s not updated: %s", blog.blog_id, author_id, e)

    logger.info("%s blog '%s'", "Drafted" if draft else "Published", blog.blog_id)
    return blog.blog_id


def author_summary(user: Optional[UserRecord]) -> Dict[str, str]:
    if user is None:
        return {}
    return {
        "fullname": user.personal_info.fullname,
        "username": user.personal_info.username,
        "profile_img": user.personal_info.profile_img,
    }


def _card(blog: BlogRecord, author: Optional[UserRecord], fields: Sequence[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields:
        if f == "activity":
            out[f] = vars(blog.activity).copy()
        elif f == "published_at":
            out["publishedAt"] = blog.published_at.isoformat()
        else:
            out[f] = getattr(blog, f)
    out["author"] = author_summary(author)
    return out


def _cards(repo: Repository, blogs: List[BlogRecord], fields: Sequence[str]) -> List[Dict[str, Any]]:
    authors = repo.get_users(b.author for b in blogs)
    return [_card(b, authors.get(b.author), fields) for b in blogs]


def latest_blogs(*, repo: Repository, limit: int = LIST_LIMIT) -> List[Dict[str, Any]]:
    blogs = repo.list_published(order=LATEST, limit=limit)
    return _cards(repo, blogs, ("blog_id", "title", "des", "banner", "activity", "tags", "published_at"))


def trending_blogs(*, repo: Repository, limit: int = LIST_LIMIT) -> List[Dict[str, Any]]:
    blogs = repo.list_published(order=TRENDING, limit=limit)
    return _cards(repo, blogs, ("blog_id", "title", "banner", "published_at"))


def search_blogs(*, repo: Repository, tag: str, limit: int = LIST_LIMIT) -> List[Dict[str, Any]]:
    tag = str(tag or "").strip().lower()
    if not tag:
        raise ValidationError("Provide a tag to search")
    blogs = repo.list_published(order=TRENDING, tag=tag, limit=limit)
    return _cards(repo, blogs, ("blog_id", "title", "published_at"))
