import pytest

from blogapi.core.errors import DependencyError, ValidationError
from blogapi.core.models import PersonalInfo, UserRecord
from blogapi.services import blog_service as bs

CONTENT = {"blocks": [{"type": "paragraph", "data": {"text": "hi"}}]}


@pytest.fixture()
def author(repo):
    return repo.insert_user(
        UserRecord(personal_info=PersonalInfo(fullname="Jane Doe", email="jane@example.com", username="jane"))
    )


def _publish(repo, author_id, **kw):
    fields = dict(title="Hello, World!", des="A post", banner="https://img/x.jpeg", tags=["Python"], content=CONTENT)
    fields.update(kw)
    return bs.create_blog(repo=repo, author_id=author_id, **fields)


@pytest.mark.parametrize(
    "override, field",
    [
        ({"des": ""}, "description"),
        ({"banner": ""}, "banner"),
        ({"content": {"blocks": []}}, "content"),
        ({"content": None}, "content"),
        ({"tags": []}, "tags"),
        ({"tags": [f"t{i}" for i in range(11)]}, "tags"),
    ],
)
def test_publish_requires_each_field(repo, author, override, field):
    with pytest.raises(ValidationError, match=field):
        _publish(repo, author.id, **override)
    assert repo.get_user(author.id).account_info.total_posts == 0


def test_publish_reports_first_missing_field_only(repo, author):
    with pytest.raises(ValidationError, match="description"):
        _publish(repo, author.id, des="", banner="", tags=[])


def test_title_is_required_even_for_drafts(repo, author):
    with pytest.raises(ValidationError, match="title"):
        _publish(repo, author.id, title="", draft=True)


def test_draft_without_tags_is_saved(repo, author):
    blog_id = _publish(repo, author.id, des="", banner="", tags=[], content={"blocks": []}, draft=True)
    blog = repo.get_blog(blog_id)
    assert blog.draft is True
    user = repo.get_user(author.id)
    assert user.account_info.total_posts == 0
    assert user.blogs == [blog.id]


def test_publish_increments_post_counter_once(repo, author):
    blog_id = _publish(repo, author.id)
    assert blog_id.startswith("Hello-World-")
    user = repo.get_user(author.id)
    assert user.account_info.total_posts == 1
    assert user.blogs == [repo.get_blog(blog_id).id]


def test_tags_are_lowercased(repo, author):
    blog_id = _publish(repo, author.id, tags=["Python", "WEB"])
    assert repo.get_blog(blog_id).tags == ["python", "web"]


def test_description_over_limit_is_rejected(repo, author):
    with pytest.raises(ValidationError, match="200"):
        _publish(repo, author.id, des="x" * 201)


def test_failed_author_update_keeps_blog(repo, author, monkeypatch):
    def boom(*a, **kw):
        raise DependencyError("down")

    monkeypatch.setattr(repo, "record_publication", boom)
    blog_id = _publish(repo, author.id)
    assert repo.get_blog(blog_id) is not None


def test_listings_only_show_published(repo, author):
    _publish(repo, author.id, title="Draft one", draft=True)
    first = _publish(repo, author.id, title="First", tags=["a"])
    second = _publish(repo, author.id, title="Second", tags=["b"])

    latest = bs.latest_blogs(repo=repo)
    assert [b["blog_id"] for b in latest] == [second, first]
    assert latest[0]["author"] == {"fullname": "Jane Doe", "username": "jane", "profile_img": ""}
    assert set(latest[0]) >= {"title", "des", "banner", "activity", "tags", "publishedAt"}


def test_trending_orders_by_reads_then_likes(repo, author):
    a = _publish(repo, author.id, title="A")
    b = _publish(repo, author.id, title="B")
    repo._blogs[repo.get_blog(a).id].activity.total_reads = 10
    trending = bs.trending_blogs(repo=repo)
    assert [t["blog_id"] for t in trending] == [a, b]


def test_search_by_tag(repo, author):
    hit = _publish(repo, author.id, title="Tagged", tags=["Python"])
    _publish(repo, author.id, title="Other", tags=["rust"])
    _publish(repo, author.id, title="Draft", tags=["python"], draft=True)
    found = bs.search_blogs(repo=repo, tag="PYTHON")
    assert [f["blog_id"] for f in found] == [hit]


def test_listing_limit_is_five(repo, author):
    for i in range(7):
        _publish(repo, author.id, title=f"Post {i}")
    assert len(bs.latest_blogs(repo=repo)) == 5


@pytest.mark.parametrize("content", [{"blocks": "abc"}, {"blocks": {"0": {}}}, {"blocks": None}, "blocks"])
def test_publish_rejects_blocks_that_are_not_a_list(repo, author, content):
    with pytest.raises(ValidationError, match="content"):
        _publish(repo, author.id, content=content)
