# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""User and blog records as stored.

Field names follow the stored document layout (``personal_info``,
``account_info``, ``activity``) so the Mongo repository can map them 1:1.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PersonalInfo:
    fullname: str
    email: str
    username: str
    password: Optional[str] = None  # argon2 hash; None for provider accounts
    profile_img: str = ""
    bio: str = ""


@dataclass
class AccountInfo:
    total_posts: int = 0
    total_reads: int = 0


@dataclass
class SocialInfo:
    followers: int = 0
    following: int = 0


@dataclass
class UserRecord:
    personal_info: PersonalInfo
    google_auth: bool = False
    account_info: AccountInfo = field(default_factory=AccountInfo)
    social: SocialInfo = field(default_factory=SocialInfo)
    blogs: List[str] = field(default_factory=list)
    id: str = ""
    joined_at: datetime = field(default_factory=utcnow)

    def to_doc(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc.pop("id")
        return doc

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "UserRecord":
        pi = dict(doc.get("personal_info") or {})
        return cls(
            id=str(doc.get("_id") or doc.get("id") or ""),
            personal_info=PersonalInfo(
                fullname=pi.get("fullname", ""),
                email=pi.get("email", ""),
                username=pi.get("username", ""),
                password=pi.get("password"),
                profile_img=pi.get("profile_img") or "",
                bio=pi.get("bio") or "",
            ),
            google_auth=bool(doc.get("google_auth", False)),
            account_info=AccountInfo(**(doc.get("account_info") or {})),
            social=SocialInfo(**(doc.get("social") or {})),
            blogs=[str(b) for b in (doc.get("blogs") or [])],
            joined_at=doc.get("joined_at") or utcnow(),
        )


@dataclass
class BlogActivity:
    total_likes: int = 0
    total_comments: int = 0
    total_reads: int = 0
    total_parent_comments: int = 0


@dataclass
class BlogRecord:
    blog_id: str
    title: str
    author: str
    des: str = ""
    banner: str = ""
    content: Dict[str, Any] = field(default_factory=lambda: {"blocks": []})
    tags: List[str] = field(default_factory=list)
    draft: bool = False
    activity: BlogActivity = field(default_factory=BlogActivity)
    published_at: datetime = field(default_factory=utcnow)
    id: str = ""

    def to_doc(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc.pop("id")
        return doc

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "BlogRecord":
        return cls(
            id=str(doc.get("_id") or doc.get("id") or ""),
            blog_id=doc.get("blog_id", ""),
            title=doc.get("title", ""),
            author=str(doc.get("author") or ""),
            des=doc.get("des") or "",
            banner=doc.get("banner") or "",
            content=doc.get("content") or {"blocks": []},
            tags=list(doc.get("tags") or []),
            draft=bool(doc.get("draft", False)),
            activity=BlogActivity(**(doc.get("activity") or {})),
            published_at=doc.get("published_at") or utcnow(),
        )
