import pytest

from blogapi.config import load_settings


def test_env_settings(monkeypatch):
    monkeypatch.delenv("BLOG_CONFIG", raising=False)
    monkeypatch.setenv("BLOG_SECRET_KEY", "abc")
    monkeypatch.setenv("BLOG_TOKEN_MAX_AGE", "3600")
    monkeypatch.setenv("BLOG_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("BLOG_RELOAD", "yes")
    s = load_settings()
    assert s.secret_key == "abc"
    assert s.token_max_age == 3600
    assert s.cors_origins == ("http://a.test", "http://b.test")
    assert s.reload is True


def test_token_expiry_defaults_to_none(monkeypatch):
    monkeypatch.delenv("BLOG_CONFIG", raising=False)
    monkeypatch.delenv("BLOG_TOKEN_MAX_AGE", raising=False)
    assert load_settings().token_max_age is None


def test_yaml_overlay(tmp_path, monkeypatch):
    monkeypatch.setenv("BLOG_SECRET_KEY", "from-env")
    cfg = tmp_path / "blog.yml"
    cfg.write_text("secret_key: from-file\nmongo_db: blogs\ncors_origins: http://c.test\n", encoding="utf-8")
    s = load_settings(str(cfg))
    assert s.secret_key == "from-file"
    assert s.mongo_db == "blogs"
    assert s.cors_origins == ("http://c.test",)


def test_yaml_unknown_keys_rejected(tmp_path):
    cfg = tmp_path / "blog.yml"
    cfg.write_text("nope: 1\n", encoding="utf-8")
    with pytest.raises(RuntimeError, match="nope"):
        load_settings(str(cfg))


def test_missing_secret_fails_app_creation(monkeypatch):
    from blogapi.app import create_app
    from blogapi.config import Settings
    from blogapi.infra.repo import MemoryRepository

    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app(Settings(secret_key=""), repo=MemoryRepository())
