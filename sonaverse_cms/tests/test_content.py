"""Integration tests for the bilingual content collections.

Covers press releases, Sonaverse stories, products, static pages and the
cross-collection slug check.
"""

import pytest


def _press(slug="launch-news", **overrides):
    body = {
        "slug": slug,
        "press_name": {"ko": "한국일보", "en": "Korea Daily"},
        "content": {
            "ko": {"title": "소나버스 출시", "body": "보행 보조기 출시 소식"},
            "en": {"title": "Sonaverse launches", "body": "Walker launch news"},
        },
        "tags": {"ko": ["출시"], "en": ["launch"]},
    }
    body.update(overrides)
    return body


def _story(slug="first-story", **overrides):
    body = {
        "slug": slug,
        "content": {
            "ko": {"title": "첫 이야기", "body": "본문"},
        },
        "youtube_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "tags": [" care ", "walker", ""],
    }
    body.update(overrides)
    return body


def _product(slug="bodeum-walker", **overrides):
    body = {
        "slug": slug,
        "name": {"ko": "보듬 보행기", "en": "Bodeum Walker"},
        "description": {"ko": "가벼운 보행 보조기", "en": "A light walker"},
        "category": "walker",
        "features": {"ko": ["경량"], "en": ["Lightweight"]},
        "specifications": {"ko": {"무게": "5kg"}},
    }
    body.update(overrides)
    return body


class TestPress:
    def test_create_requires_session(self, client):
        response = client.post("/api/press", json=_press())
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_create_and_public_read(self, admin_client):
        response = admin_client.post("/api/press", json=_press())
        assert response.status_code == 201
        press = response.json()["press"]
        assert press["slug"] == "launch-news"
        assert press["content"]["ko"]["title"] == "소나버스 출시"

        admin_client.cookies.clear()
        en = admin_client.get("/api/press/launch-news?lang=en").json()["press"]
        assert en["title"] == "Sonaverse launches"
        assert en["press_name"] == "Korea Daily"
        assert en["tags"] == ["launch"]

        ko = admin_client.get("/api/press/launch-news").json()["press"]
        assert ko["title"] == "소나버스 출시"

    def test_english_falls_back_to_korean(self, admin_client):
        body = _press(content={"ko": {"title": "국문만", "body": "본문"}})
        admin_client.post("/api/press", json=body)
        item = admin_client.get("/api/press/launch-news?lang=en").json()["press"]
        assert item["title"] == "국문만"

    def test_slug_is_normalized(self, admin_client):
        response = admin_client.post("/api/press", json=_press(slug="  Big News "))
        assert response.status_code == 201
        assert response.json()["press"]["slug"] == "big-news"

    def test_invalid_slug_rejected(self, admin_client):
        response = admin_client.post("/api/press", json=_press(slug="bad/slug"))
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "잘못된 요청 형식입니다."}

    def test_korean_content_required(self, admin_client):
        body = _press(content={"en": {"title": "English only"}})
        assert admin_client.post("/api/press", json=body).status_code == 400

    def test_duplicate_slug(self, admin_client):
        admin_client.post("/api/press", json=_press())
        response = admin_client.post("/api/press", json=_press())
        assert response.status_code == 400
        assert response.json()["error"] == "이미 존재하는 슬러그입니다."

    def test_inactive_hidden_from_public(self, admin_client):
        admin_client.post("/api/press", json=_press(is_active=False))
        admin_client.post("/api/press", json=_press(slug="visible"))

        admin_view = admin_client.get("/api/press?admin=true").json()
        assert admin_view["total"] == 2
        only_inactive = admin_client.get("/api/press?admin=true&active=false").json()
        assert [p["slug"] for p in only_inactive["results"]] == ["launch-news"]

        admin_client.cookies.clear()
        public = admin_client.get("/api/press").json()
        assert public["total"] == 1
        assert public["results"][0]["slug"] == "visible"
        assert admin_client.get("/api/press/launch-news").status_code == 404

    def test_admin_view_requires_session(self, client):
        assert client.get("/api/press?admin=true").status_code == 401

    def test_pagination_envelope(self, admin_client):
        for i in range(3):
            admin_client.post("/api/press", json=_press(slug=f"news-{i}"))
        data = admin_client.get("/api/press?page=2&pageSize=2").json()
        assert data["total"] == 3
        assert data["page"] == 2
        assert data["pageSize"] == 2
        assert data["totalPages"] == 2
        assert len(data["results"]) == 1

    def test_bad_page_number(self, client):
        assert client.get("/api/press?page=abc").status_code == 400

    def test_search_uses_requested_language(self, admin_client):
        admin_client.post("/api/press", json=_press())
        admin_client.post(
            "/api/press",
            json=_press(
                slug="other",
                content={"ko": {"title": "다른 소식"}, "en": {"title": "Other"}},
            ),
        )
        en = admin_client.get("/api/press?lang=en&search=LAUNCH").json()
        assert [p["slug"] for p in en["results"]] == ["launch-news"]
        ko = admin_client.get("/api/press?search=다른").json()
        assert [p["slug"] for p in ko["results"]] == ["other"]

    def test_search_matches_korean_fallback(self, admin_client):
        admin_client.post(
            "/api/press",
            json=_press(
                press_name={"ko": "한국일보"},
                content={"ko": {"title": "국문만", "body": "본문"}},
            ),
        )
        en = admin_client.get("/api/press?lang=en&search=국문").json()
        assert [p["slug"] for p in en["results"]] == ["launch-news"]
        by_outlet = admin_client.get("/api/press?lang=en&search=한국일보").json()
        assert by_outlet["total"] == 1

    def test_update_and_delete(self, admin_client):
        admin_client.post("/api/press", json=_press())
        response = admin_client.patch(
            "/api/press/launch-news", json={"slug": "renamed", "is_active": False}
        )
        assert response.status_code == 200
        press = response.json()["press"]
        assert press["slug"] == "renamed"
        assert press["is_active"] is False
        assert press["updated_by"]

        assert admin_client.delete("/api/press/renamed").status_code == 200
        assert admin_client.delete("/api/press/renamed").status_code == 404

    def test_update_to_taken_slug(self, admin_client):
        admin_client.post("/api/press", json=_press())
        admin_client.post("/api/press", json=_press(slug="taken"))
        response = admin_client.patch("/api/press/launch-news", json={"slug": "taken"})
        assert response.status_code == 400


class TestStories:
    def test_create_cleans_tags_and_sets_author(self, admin_client):
        response = admin_client.post("/api/sonaverse-story", json=_story())
        assert response.status_code == 201
        story = response.json()["story"]
        assert story["tags"] == ["care", "walker"]
        assert story["author_id"]
        assert story["is_main"] is False

    @pytest.mark.parametrize(
        "url",
        [
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://youtube.com/shorts/dQw4w9WgXcQ",
        ],
    )
    def test_youtube_url_forms(self, admin_client, url):
        response = admin_client.post("/api/sonaverse-story", json=_story(youtube_url=url))
        assert response.status_code == 201

    def test_non_youtube_url_rejected(self, admin_client):
        body = _story(youtube_url="https://vimeo.com/123")
        assert admin_client.post("/api/sonaverse-story", json=body).status_code == 400

    def test_body_required(self, admin_client):
        body = _story(content={"ko": {"title": "제목만"}})
        assert admin_client.post("/api/sonaverse-story", json=body).status_code == 400

    def test_tag_and_main_filters(self, admin_client):
        admin_client.post("/api/sonaverse-story", json=_story())
        admin_client.post(
            "/api/sonaverse-story",
            json=_story(slug="main-story", tags=["family"], is_main=True),
        )
        admin_client.post(
            "/api/sonaverse-story", json=_story(slug="draft", is_published=False)
        )
        admin_client.cookies.clear()

        public = admin_client.get("/api/sonaverse-story").json()
        assert public["total"] == 2
        tagged = admin_client.get("/api/sonaverse-story?tag=walker").json()
        assert [s["slug"] for s in tagged["results"]] == ["first-story"]
        main = admin_client.get("/api/sonaverse-story?main=true").json()
        assert [s["slug"] for s in main["results"]] == ["main-story"]
        assert admin_client.get("/api/sonaverse-story/draft").status_code == 404

    def test_update_story(self, admin_client):
        admin_client.post("/api/sonaverse-story", json=_story())
        response = admin_client.patch(
            "/api/sonaverse-story/first-story", json={"tags": ["updated"], "is_main": True}
        )
        assert response.status_code == 200
        story = response.json()["story"]
        assert story["tags"] == ["updated"]
        assert story["is_main"] is True

    def test_delete_story(self, admin_client):
        admin_client.post("/api/sonaverse-story", json=_story())
        assert admin_client.delete("/api/sonaverse-story/first-story").status_code == 200
        assert admin_client.get("/api/sonaverse-story/first-story").status_code == 404


class TestProducts:
    def test_create_and_localized_read(self, admin_client):
        response = admin_client.post("/api/products", json=_product())
        assert response.status_code == 201
        assert response.json()["product"]["category"] == "walker"

        en = admin_client.get("/api/products/bodeum-walker?lang=en").json()["product"]
        assert en["name"] == "Bodeum Walker"
        assert en["features"] == ["Lightweight"]
        # English specifications missing, Korean used instead
        assert en["specifications"] == {"무게": "5kg"}

    def test_category_filter(self, admin_client):
        admin_client.post("/api/products", json=_product())
        admin_client.post(
            "/api/products", json=_product(slug="soft-diaper", category="diaper")
        )
        data = admin_client.get("/api/products?category=diaper").json()
        assert data["total"] == 1
        assert data["results"][0]["slug"] == "soft-diaper"

    def test_search_matches_korean_fallback(self, admin_client):
        admin_client.post(
            "/api/products",
            json=_product(name={"ko": "보듬 기저귀"}, description={"ko": "부드러운"}),
        )
        data = admin_client.get("/api/products?lang=en&search=기저귀").json()
        assert [p["slug"] for p in data["results"]] == ["bodeum-walker"]

    def test_update_and_delete(self, admin_client):
        admin_client.post("/api/products", json=_product())
        response = admin_client.patch(
            "/api/products/bodeum-walker", json={"category": "mobility"}
        )
        assert response.status_code == 200
        assert response.json()["product"]["category"] == "mobility"
        assert admin_client.delete("/api/products/bodeum-walker").status_code == 200
        assert admin_client.get("/api/products/bodeum-walker").status_code == 404

    def test_editor_may_manage_products(self, admin_client, editor_client):
        response = editor_client.post("/api/products", json=_product())
        assert response.status_code == 201


class TestPages:
    def _sections(self):
        return [
            {
                "section_key": "hero",
                "type": "banner",
                "content": {"ko": {"title": "회사 소개"}, "en": {"title": "About us"}},
            },
            {
                "section_key": "history",
                "type": "timeline",
                "content": {"ko": {"items": ["2019 설립"]}},
            },
        ]

    def test_upsert_and_read(self, admin_client):
        response = admin_client.put("/api/pages/about", json={"sections": self._sections()})
        assert response.status_code == 200
        assert len(response.json()["page"]["sections"]) == 2

        assert admin_client.get("/api/pages").json()["pages"] == ["about"]

        page = admin_client.get("/api/pages/about?lang=en").json()["page"]
        assert page["sections"][0]["content"] == {"title": "About us"}
        assert page["sections"][1]["content"] == {"items": ["2019 설립"]}

    def test_upsert_replaces(self, admin_client):
        admin_client.put("/api/pages/about", json={"sections": self._sections()})
        admin_client.put("/api/pages/about", json={"sections": self._sections()[:1]})
        page = admin_client.get("/api/pages/about?admin=true").json()["page"]
        assert [s["section_key"] for s in page["sections"]] == ["hero"]

    def test_duplicate_section_keys_rejected(self, admin_client):
        sections = self._sections()
        sections[1]["section_key"] = "hero"
        response = admin_client.put("/api/pages/about", json={"sections": sections})
        assert response.status_code == 400

    def test_invalid_page_key(self, admin_client):
        response = admin_client.put("/api/pages/Bad_Key", json={"sections": []})
        assert response.status_code == 400

    def test_inactive_page_hidden(self, admin_client):
        admin_client.put(
            "/api/pages/about", json={"sections": self._sections(), "is_active": False}
        )
        admin_client.cookies.clear()
        assert admin_client.get("/api/pages/about").status_code == 404
        assert admin_client.get("/api/pages").json()["pages"] == []

    def test_delete_page(self, admin_client):
        admin_client.put("/api/pages/about", json={"sections": self._sections()})
        assert admin_client.delete("/api/pages/about").status_code == 200
        assert admin_client.delete("/api/pages/about").status_code == 404


class TestSlugCheck:
    def test_no_conflict(self, client):
        response = client.post("/api/check-slug", json={"slug": "fresh"})
        assert response.status_code == 200
        data = response.json()
        assert data["hasConflict"] is False
        assert data["results"]["press"] == {"exists": False}

    def test_conflict_across_collections(self, admin_client):
        admin_client.post("/api/press", json=_press(slug="shared"))
        admin_client.post("/api/products", json=_product(slug="shared"))
        data = admin_client.post("/api/check-slug", json={"slug": " Shared "}).json()
        assert data["slug"] == "shared"
        assert data["hasConflict"] is True
        assert data["results"]["press"] == {"exists": True, "title": "소나버스 출시"}
        assert data["results"]["product"] == {"exists": True, "title": "보듬 보행기"}
        assert data["results"]["sonaverseStory"] == {"exists": False}

    def test_slug_required(self, client):
        response = client.post("/api/check-slug", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "슬러그가 필요합니다."
