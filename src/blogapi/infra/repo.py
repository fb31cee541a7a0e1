# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Storage contract for users and blogs, plus an in-process implementation.

Uniqueness (email, username, blog_id) is enforced at insert time. Callers
never rely on a prior existence check being still true at insert.
"""

from __future__ import annotations

import copy
import threading
import uuid
from typing import Dict, Iterable, List, Optional, Protocol

from blogapi.core.errors import ConflictError, DependencyError
from blogapi.core.models import BlogRecord, UserRecord

LATEST = "latest"
TRENDING = "trending"


class Repository(Protocol):
    def find_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    def get_user(self, user_id: str) -> Optional[UserRecord]: ...

    def get_users(self, user_ids: Iterable[str]) -> Dict[str, UserRecord]: ...

    def username_exists(self, username: str) -> bool: ...

    def insert_user(self, user: UserRecord) -> UserRecord: ...

    def blog_id_exists(self, blog_id: str) -> bool: ...

    def insert_blog(self, blog: BlogRecord) -> BlogRecord: ...

    def record_publication(self, user_id: str, blog_ref: str, *, increment: int) -> None: ...

    def list_published(self, *, order: str = LATEST, tag: Optional[str] = None, limit: int = 5) -> List[BlogRecord]: ...


def sort_key(order: str):
    if order == TRENDING:
        return lambda b: (b.activity.total_reads, b.activity.total_likes, b.published_at)
    if order == LATEST:
        return lambda b: b.published_at
    raise ValueError(f"Unknown order '{order}'")


class MemoryRepository:
    """Dict-backed repository. All writes happen under one lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, UserRecord] = {}
        self._blogs: Dict[str, BlogRecord] = {}

    # --- users ---

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            for u in self._users.values():
                if u.personal_info.email == email:
                    return copy.deepcopy(u)
        return None

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            u = self._users.get(str(user_id))
            return copy.deepcopy(u) if u else None

    def get_users(self, user_ids: Iterable[str]) -> Dict[str, UserRecord]:
        wanted = {str(i) for i in user_ids}
        with self._lock:
            return {uid: copy.deepcopy(u) for uid, u in self._users.items() if uid in wanted}

    def username_exists(self, username: str) -> bool:
        with self._lock:
            return any(u.personal_info.username == username for u in self._users.values())

    def insert_user(self, user: UserRecord) -> UserRecord:
        with self._lock:
            for u in self._users.values():
                if u.personal_info.email == user.personal_info.email:
                    raise ConflictError("Email already exists", field="email")
                if u.personal_info.username == user.personal_info.username:
                    raise ConflictError("Username already exists", field="username")
            stored = copy.deepcopy(user)
            stored.id = uuid.uuid4().hex
            self._users[stored.id] = stored
            return copy.deepcopy(stored)

    def count_users(self) -> int:
        with self._lock:
            return len(self._users)

    # --- blogs ---

    def blog_id_exists(self, blog_id: str) -> bool:
        with self._lock:
            return any(b.blog_id == blog_id for b in self._blogs.values())

    def insert_blog(self, blog: BlogRecord) -> BlogRecord:
        with self._lock:
            if any(b.blog_id == blog.blog_id for b in self._blogs.values()):
                raise ConflictError("Blog id already exists", field="blog_id")
            stored = copy.deepcopy(blog)
            stored.id = uuid.uuid4().hex
            self._blogs[stored.id] = stored
            return copy.deepcopy(stored)

    def record_publication(self, user_id: str, blog_ref: str, *, increment: int) -> None:
        with self._lock:
            u = self._users.get(str(user_id))
            if u is None:
                raise DependencyError("Failed to update total posts numbers")
            u.account_info.total_posts += increment
            u.blogs.append(str(blog_ref))

    def get_blog(self, blog_id: str) -> Optional[BlogRecord]:
        with self._lock:
            for b in self._blogs.values():
                if b.blog_id == blog_id:
                    return copy.deepcopy(b)
        return None

    def list_published(self, *, order: str = LATEST, tag: Optional[str] = None, limit: int = 5) -> List[BlogRecord]:
        key = sort_key(order)
        with self._lock:
            # insertion order breaks timestamp ties
            hits = [
                (i, b) for i, b in enumerate(self._blogs.values()) if not b.draft and (tag is None or tag in b.tags)
            ]
            hits.sort(key=lambda p: (key(p[1]), p[0]), reverse=True)
            return [copy.deepcopy(b) for _, b in hits[:limit]]
