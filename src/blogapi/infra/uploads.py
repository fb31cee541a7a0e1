# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from blogapi.core.errors import DependencyError
from blogapi.core.handles import random_suffix

logger = logging.getLogger(__name__)


class UploadUrlIssuer(Protocol):
    def upload_url(self) -> str: ...


def image_key(now_ms: Optional[int] = None) -> str:
    ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"{random_suffix(21)}-{ms}.jpeg"


class S3UploadUrlIssuer:
    """Presigned PUT URLs for banner images."""

    def __init__(self, bucket: str, *, region: str = "ap-south-1", expires: int = 1000, client: Any = None):
        if not bucket:
            raise RuntimeError("Missing BLOG_UPLOAD_BUCKET in environment")
        self.bucket = bucket
        self.expires = expires
        self._client = client or boto3.client("s3", region_name=region)

    def upload_url(self) -> str:
        try:
            return self._client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": image_key(), "ContentType": "image/jpeg"},
                ExpiresIn=self.expires,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Could not sign upload url: %s", e)
            raise DependencyError("Could not create upload url") from e
