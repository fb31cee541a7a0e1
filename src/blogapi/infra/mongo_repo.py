# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from blogapi.core.errors import ConflictError, DependencyError
from blogapi.core.models import BlogRecord, UserRecord
from blogapi.infra.repo import LATEST, TRENDING

logger = logging.getLogger(__name__)

# unique index key -> (field name, message)
_UNIQUE_FIELDS = {
    "personal_info.email": ("email", "Email already exists"),
    "personal_info.username": ("username", "Username already exists"),
    "blog_id": ("blog_id", "Blog id already exists"),
}

_SORTS = {
    LATEST: [("published_at", DESCENDING)],
    TRENDING: [
        ("activity.total_reads", DESCENDING),
        ("activity.total_likes", DESCENDING),
        ("published_at", DESCENDING),
    ],
}


def _oid(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def conflict_from(err: DuplicateKeyError) -> ConflictError:
    """Translate a duplicate-key write error into the field that collided."""
    details = err.details or {}
    keys = list((details.get("keyPattern") or details.get("keyValue") or {}).keys())
    if not keys:
        msg = str(details.get("errmsg") or err)
        keys = [k for k in _UNIQUE_FIELDS if k in msg]
    for k in keys:
        if k in _UNIQUE_FIELDS:
            field, message = _UNIQUE_FIELDS[k]
            return ConflictError(message, field=field)
    return ConflictError("Duplicate value")


class MongoRepository:
    def __init__(self, db: Database):
        self.db = db
        self.users = db["users"]
        self.blogs = db["blogs"]

    @classmethod
    def connect(cls, url: str, db_name: str) -> "MongoRepository":
        client: MongoClient = MongoClient(url, tz_aware=True)
        repo = cls(client[db_name])
        repo.ensure_indexes()
        return repo

    def ensure_indexes(self) -> None:
        try:
            self.users.create_index([("personal_info.email", ASCENDING)], unique=True)
            self.users.create_index([("personal_info.username", ASCENDING)], unique=True)
            self.blogs.create_index([("blog_id", ASCENDING)], unique=True)
            self.blogs.create_index([("draft", ASCENDING), ("tags", ASCENDING)])
        except PyMongoError as e:
            logger.error("Could not create indexes: %s", e)
            raise DependencyError("Database is not available") from e

    # --- users ---

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        doc = self._find_one(self.users, {"personal_info.email": email})
        return UserRecord.from_doc(doc) if doc else None

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        oid = _oid(user_id)
        if oid is None:
            return None
        doc = self._find_one(self.users, {"_id": oid})
        return UserRecord.from_doc(doc) if doc else None

    def get_users(self, user_ids: Iterable[str]) -> Dict[str, UserRecord]:
        oids = [o for o in (_oid(i) for i in set(user_ids)) if o is not None]
        if not oids:
            return {}
        try:
            docs = list(self.users.find({"_id": {"$in": oids}}))
        except PyMongoError as e:
            raise DependencyError(str(e)) from e
        return {str(d["_id"]): UserRecord.from_doc(d) for d in docs}

    def username_exists(self, username: str) -> bool:
        return self._find_one(self.users, {"personal_info.username": username}, {"_id": 1}) is not None

    def insert_user(self, user: UserRecord) -> UserRecord:
        doc = user.to_doc()
        doc["blogs"] = [o for o in (_oid(b) for b in user.blogs) if o is not None]
        inserted_id = self._insert(self.users, doc)
        user.id = str(inserted_id)
        return user

    # --- blogs ---

    def blog_id_exists(self, blog_id: str) -> bool:
        return self._find_one(self.blogs, {"blog_id": blog_id}, {"_id": 1}) is not None

    def insert_blog(self, blog: BlogRecord) -> BlogRecord:
        doc = blog.to_doc()
        doc["author"] = _oid(blog.author) or blog.author
        inserted_id = self._insert(self.blogs, doc)
        blog.id = str(inserted_id)
        return blog

    def record_publication(self, user_id: str, blog_ref: str, *, increment: int) -> None:
        try:
            res = self.users.update_one(
                {"_id": _oid(user_id)},
                {
                    "$inc": {"account_info.total_posts": increment},
                    "$push": {"blogs": _oid(blog_ref) or blog_ref},
                },
            )
        except PyMongoError as e:
            raise DependencyError("Failed to update total posts numbers") from e
        if res.matched_count == 0:
            raise DependencyError("Failed to update total posts numbers")

    def list_published(self, *, order: str = LATEST, tag: Optional[str] = None, limit: int = 5) -> List[BlogRecord]:
        if order not in _SORTS:
            raise ValueError(f"Unknown order '{order}'")
        query: Dict[str, Any] = {"draft": False}
        if tag is not None:
            query["tags"] = tag
        try:
            docs = list(self.blogs.find(query).sort(_SORTS[order]).limit(limit))
        except PyMongoError as e:
            raise DependencyError(str(e)) from e
        return [BlogRecord.from_doc(d) for d in docs]

    # --- helpers ---

    @staticmethod
    def _find_one(coll, query: Dict[str, Any], projection: Optional[Dict[str, Any]] = None):
        try:
            return coll.find_one(query, projection)
        except PyMongoError as e:
            raise DependencyError(str(e)) from e

    @staticmethod
    def _insert(coll, doc: Dict[str, Any]):
        try:
            return coll.insert_one(doc).inserted_id
        except DuplicateKeyError as e:
            raise conflict_from(e) from e
        except PyMongoError as e:
            raise DependencyError(str(e)) from e
