import re

import pytest
from pymongo.errors import DuplicateKeyError

from blogapi.core.errors import AuthError, DependencyError
from blogapi.infra.mongo_repo import conflict_from
from blogapi.infra import provider as provider_mod
from blogapi.infra.provider import FirebaseTokenVerifier
from blogapi.infra.uploads import S3UploadUrlIssuer, image_key


def test_duplicate_key_maps_to_field():
    err = DuplicateKeyError("dup", 11000, {"keyPattern": {"personal_info.email": 1}})
    c = conflict_from(err)
    assert c.field == "email"
    assert c.message == "Email already exists"

    err = DuplicateKeyError("dup", 11000, {"errmsg": "E11000 index: personal_info.username_1 dup key"})
    assert conflict_from(err).field == "username"


def test_garbage_provider_token_is_auth_error():
    v = FirebaseTokenVerifier("demo-project")
    with pytest.raises(AuthError):
        v.verify("not.a.jwt")
    with pytest.raises(AuthError):
        v.verify("")


def test_jwks_outage_is_dependency_error(monkeypatch):
    import requests

    def down(*a, **kw):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(provider_mod.requests, "get", down)
    monkeypatch.setattr(provider_mod.jwt, "get_unverified_header", lambda t: {"kid": "k1", "alg": "RS256"})
    with pytest.raises(DependencyError):
        FirebaseTokenVerifier("demo-project").verify("a.b.c")


def test_verifier_requires_project_id():
    with pytest.raises(RuntimeError):
        FirebaseTokenVerifier("")


class _FakeS3:
    def __init__(self):
        self.calls = []

    def generate_presigned_url(self, op, Params, ExpiresIn):
        self.calls.append((op, Params, ExpiresIn))
        return f"https://{Params['Bucket']}.s3.test/{Params['Key']}"


def test_s3_upload_url():
    s3 = _FakeS3()
    url = S3UploadUrlIssuer("bucket", client=s3).upload_url()
    op, params, expires = s3.calls[0]
    assert op == "put_object"
    assert params["ContentType"] == "image/jpeg"
    assert expires == 1000
    assert url.endswith(params["Key"])


def test_image_key_format():
    assert re.fullmatch(r"[A-Za-z0-9]{21}-1700000000000\.jpeg", image_key(1700000000000))
