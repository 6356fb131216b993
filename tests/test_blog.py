# tests/test_blog.py
import pytest


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def create_post(client, token, **fields):
    payload = {"title": "Hello", "slug": "hello", "content": "<p>Body</p>", "published": True}
    payload.update(fields)
    return client.post('/api/blog/posts', json=payload, headers=bearer(token))


def test_only_published_posts_are_listed(client, admin_token):
    assert create_post(client, admin_token, slug="first").status_code == 201
    assert create_post(client, admin_token, slug="draft", published=False).status_code == 201
    assert create_post(client, admin_token, slug="second").status_code == 201

    body = client.get('/api/blog/posts').get_json()
    assert [p["slug"] for p in body["posts"]] == ["second", "first"]
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 2, "pages": 1}
    assert body["posts"][0]["author"]["email"] == "admin@example.com"
    assert "content" not in body["posts"][0]


def test_get_post_by_slug(client, admin_token):
    create_post(client, admin_token, slug="seo-basics", metaTitle="SEO", tags=["seo", "seo", "web"])
    resp = client.get('/api/blog/posts/seo-basics')
    assert resp.status_code == 200
    post = resp.get_json()
    assert post["metaTitle"] == "SEO"
    assert post["tags"] == ["seo", "web"]
    assert post["publishedAt"] is not None


def test_draft_is_not_visible_by_slug(client, admin_token):
    resp = create_post(client, admin_token, slug="secret", published=False)
    assert resp.get_json()["publishedAt"] is None
    resp = client.get('/api/blog/posts/secret')
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Post not found"}


@pytest.mark.parametrize("flag", ["false", "true", 0, 1, "yes"])
def test_published_flag_must_be_boolean(client, admin_token, flag):
    resp = create_post(client, admin_token, slug="flagged", published=flag)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "published must be a boolean"}
    assert client.get('/api/blog/posts/flagged').status_code == 404


def test_missing_published_flag_creates_draft(client, admin_token):
    payload = {"title": "Quiet", "slug": "quiet", "content": "c"}
    resp = client.post('/api/blog/posts', json=payload, headers=bearer(admin_token))
    assert resp.status_code == 201
    assert resp.get_json()["publishedAt"] is None


def test_duplicate_slug_conflicts(client, admin_token):
    assert create_post(client, admin_token, slug="dup").status_code == 201
    resp = create_post(client, admin_token, slug="dup")
    assert resp.status_code == 409


def test_post_content_is_sanitized(client, admin_token):
    resp = create_post(client, admin_token, slug="xss", title="<b>Bold</b> title",
                       content='<p onclick="x()">Hi</p><script>alert(1)</script>')
    post = resp.get_json()
    assert post["title"] == "Bold title"
    assert "<script>" not in post["content"]
    assert "onclick" not in post["content"]
    assert post["content"].startswith("<p>Hi</p>")


@pytest.mark.parametrize("payload", [
    {"title": "No slug", "content": "c"},
    {"title": "Bad slug", "slug": "Not A Slug", "content": "c"},
    {"title": "Tags", "slug": "tags", "content": "c", "tags": "seo"},
    {"title": "Long", "slug": "long", "content": "c", "metaTitle": "m" * 301},
    {"title": "t" * 301, "slug": "long-title", "content": "c"},
])
def test_create_post_validation(client, admin_token, payload):
    resp = client.post('/api/blog/posts', json=payload, headers=bearer(admin_token))
    assert resp.status_code == 400


def test_blog_pagination(client, admin_token):
    for i in range(3):
        create_post(client, admin_token, slug=f"post-{i}")
    body = client.get('/api/blog/posts?page=2&limit=2').get_json()
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}
    assert [p["slug"] for p in body["posts"]] == ["post-0"]
