from __future__ import annotations

import json
from pathlib import Path

from bson import ObjectId

from vnjp_cms import schema
from vnjp_cms.content import parents

from conftest import stored_files, upload


NEWS_FIELDS = {
    "visible": "true",
    "day": "03/15/2023",
    "vi[title]": "Tin tức",
    "vi[description]": "Mô tả",
    "jp[title]": "ニュース",
    "jp[description]": "説明",
}


def _create_news(client, headers, **fields):
    data = dict(NEWS_FIELDS)
    data.update(fields)
    r = client.post(
        "/news/admin/news/create",
        data=data,
        files=[("viPoster", upload("vi.png")), ("jpPoster", upload("jp.png"))],
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


def _add_item(client, headers, news_id, lang="vi", files=None, **fields):
    data = {"content": "Đoạn văn", "linkGroup[0][url]": "http://example.com", "linkGroup[0][title]": "Link"}
    data.update(fields)
    r = client.post(
        f"/news/admin/news-item/create/{lang}/{news_id}",
        data=data,
        files=files or [("imageCenter", upload("center.png"))],
        headers=headers,
    )
    assert r.status_code == 200, r.text
    news = client.get(f"/news/detail/{news_id}").json()["news"]
    return news[lang]["news"][-1]["id"]


def test_create_requires_both_posters(client, db, cfg, admin_headers):
    r = client.post(
        "/news/admin/news/create",
        data=NEWS_FIELDS,
        files=[("viPoster", upload("vi.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert db[schema.NEWS].count_documents({}) == 0
    assert db[schema.YEARS].count_documents({}) == 0
    assert stored_files(cfg) == []


def test_create_rejects_invalid_body_before_saving(client, db, cfg, admin_headers):
    data = {k: v for k, v in NEWS_FIELDS.items() if k != "day"}
    r = client.post(
        "/news/admin/news/create",
        data=data,
        files=[("viPoster", upload("vi.png")), ("jpPoster", upload("jp.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert db[schema.NEWS].count_documents({}) == 0
    assert stored_files(cfg) == []


def test_create_requires_admin(client):
    r = client.post(
        "/news/admin/news/create",
        data=NEWS_FIELDS,
        files=[("viPoster", upload("vi.png")), ("jpPoster", upload("jp.png"))],
    )
    assert r.status_code == 401


def test_create_stores_posters_and_counts_year(client, db, cfg, admin_headers):
    news_id = _create_news(client, admin_headers)

    doc = db[schema.NEWS].find_one({"_id": ObjectId(news_id)})
    assert doc["visible"] is True
    assert doc["vi"]["title"] == "Tin tức"
    assert doc["vi"]["news"] == [] and doc["jp"]["news"] == []
    for lang in ("vi", "jp"):
        poster = Path(doc[lang]["poster"])
        assert poster.exists()
        assert poster.parent == Path(cfg.UPLOAD_DIR) / "news"
        assert poster.name.startswith("admin-")

    year = db[schema.YEARS].find_one({"year": 2023})
    assert year["totalNews"] == 1

    _create_news(client, admin_headers)
    assert db[schema.YEARS].find_one({"year": 2023})["totalNews"] == 2
    r = client.get("/news/year/all")
    assert [y["year"] for y in r.json()["years"]] == [2023]


def test_update_moves_year_and_replaces_poster(client, db, admin_headers):
    news_id = _create_news(client, admin_headers)
    old_poster = Path(db[schema.NEWS].find_one({"_id": ObjectId(news_id)})["vi"]["poster"])

    r = client.post(
        f"/news/admin/news/update/{news_id}",
        data={"day": "2024-01-02", "vi[title]": "Mới"},
        files=[("viPoster", upload("vi2.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json() == {"id": news_id}

    doc = db[schema.NEWS].find_one({"_id": ObjectId(news_id)})
    assert doc["vi"]["title"] == "Mới"
    assert doc["vi"]["description"] == "Mô tả"
    assert not old_poster.exists()
    assert Path(doc["vi"]["poster"]).exists()

    assert db[schema.YEARS].find_one({"year": 2023}) is None
    assert db[schema.YEARS].find_one({"year": 2024})["totalNews"] == 1


def test_item_create_appends_reference(client, db, admin_headers):
    news_id = _create_news(client, admin_headers)
    item_id = _add_item(
        client,
        admin_headers,
        news_id,
        lang="jp",
        files=[
            ("imageGroup[]", upload("g1.png")),
            ("imageGroup[]", upload("g2.png")),
            ("pdf", upload("doc.pdf", b"%PDF", "application/pdf")),
        ],
    )

    item = db[schema.NEWS_ITEMS].find_one({"_id": ObjectId(item_id)})
    assert len(item["imageGroup"]) == 2
    assert item["pdf"].endswith("doc.pdf")
    assert item["linkGroup"] == [{"content": None, "title": "Link", "url": "http://example.com"}]

    r = client.get(f"/news/news-item/detail/{item_id}")
    assert r.status_code == 200
    assert r.json()["newsItem"]["_id"] == item_id


def test_item_create_rejects_unknown_language(client, admin_headers):
    news_id = _create_news(client, admin_headers)
    r = client.post(f"/news/admin/news-item/create/en/{news_id}", data={"content": "x"}, headers=admin_headers)
    assert r.status_code == 400


def test_detail_full_is_cached_until_a_write(client, db, store, admin_headers):
    news_id = _create_news(client, admin_headers)
    _add_item(client, admin_headers, news_id)

    r = client.get(f"/news/detail-full/{news_id}")
    assert r.status_code == 200
    body = r.json()
    assert body["newsDetail"]["_id"] == news_id
    assert len(body["newsVi"]) == 1
    assert body["newsJp"] == []
    assert json.loads(store.get(f"NEWS_KEY{news_id}")) == body

    # A cache hit never reaches MongoDB.
    snapshot = list(db[schema.NEWS].find())
    db[schema.NEWS].delete_many({})
    assert client.get(f"/news/detail-full/{news_id}").json() == body
    db[schema.NEWS].insert_many(snapshot)

    _add_item(client, admin_headers, news_id, lang="jp")
    assert store.get(f"NEWS_KEY{news_id}") is None
    body = client.get(f"/news/detail-full/{news_id}").json()
    assert len(body["newsJp"]) == 1


def test_item_update_keeps_echoed_paths_and_clears_the_rest(client, db, admin_headers):
    news_id = _create_news(client, admin_headers)
    item_id = _add_item(
        client,
        admin_headers,
        news_id,
        files=[("imageCenter", upload("center.png")), ("imageLeft", upload("left.png"))],
    )
    item = db[schema.NEWS_ITEMS].find_one({"_id": ObjectId(item_id)})
    center, left = Path(item["imageCenter"]), Path(item["imageLeft"])

    r = client.post(
        f"/news/admin/news-item/update/{news_id}/{item_id}",
        data={"content": "Sửa", "imageCenter": item["imageCenter"], "imageLeft": "/somewhere/else.png"},
        files=[("video", upload("clip.mp4", b"mp4", "video/mp4"))],
        headers=admin_headers,
    )
    assert r.status_code == 200

    item = db[schema.NEWS_ITEMS].find_one({"_id": ObjectId(item_id)})
    assert item["content"] == "Sửa"
    assert item["imageCenter"] == center.as_posix()
    assert center.exists()
    assert item["imageLeft"] is None
    assert not left.exists()
    assert Path(item["video"]).exists()


def test_item_routes_check_the_parent(client, db, admin_headers):
    first = _create_news(client, admin_headers)
    second = _create_news(client, admin_headers)
    item_id = _add_item(client, admin_headers, first)

    r = client.post(f"/news/admin/news-item/update/{second}/{item_id}", data={"content": "x"}, headers=admin_headers)
    assert r.status_code == 404
    r = client.delete(f"/news/admin/news-item/delete/{second}/{item_id}", headers=admin_headers)
    assert r.status_code == 404
    assert db[schema.NEWS_ITEMS].count_documents({}) == 1


def test_item_delete_removes_files_and_reference(client, db, admin_headers):
    news_id = _create_news(client, admin_headers)
    item_id = _add_item(client, admin_headers, news_id)
    center = Path(db[schema.NEWS_ITEMS].find_one({"_id": ObjectId(item_id)})["imageCenter"])

    r = client.delete(f"/news/admin/news-item/delete/{news_id}/{item_id}", headers=admin_headers)
    assert r.status_code == 204
    assert not center.exists()
    assert db[schema.NEWS_ITEMS].count_documents({}) == 0
    assert db[schema.NEWS].find_one({"_id": ObjectId(news_id)})["vi"]["news"] == []


def test_delete_cascades_to_items_files_cache_and_year(client, db, store, cfg, admin_headers):
    news_id = _create_news(client, admin_headers)
    _add_item(client, admin_headers, news_id, lang="vi")
    _add_item(client, admin_headers, news_id, lang="jp")
    client.get(f"/news/detail-full/{news_id}")
    assert store.get(f"NEWS_KEY{news_id}") is not None
    assert len(stored_files(cfg)) == 4

    r = client.delete(f"/news/admin/news/delete/{news_id}", headers=admin_headers)
    assert r.status_code == 204
    assert r.content == b""

    assert db[schema.NEWS].count_documents({}) == 0
    assert db[schema.NEWS_ITEMS].count_documents({}) == 0
    assert db[schema.YEARS].count_documents({}) == 0
    assert store.get(f"NEWS_KEY{news_id}") is None
    assert stored_files(cfg) == []


def test_delete_tolerates_missing_files(client, db, admin_headers):
    news_id = _create_news(client, admin_headers)
    doc = db[schema.NEWS].find_one({"_id": ObjectId(news_id)})
    Path(doc["vi"]["poster"]).unlink()

    r = client.delete(f"/news/admin/news/delete/{news_id}", headers=admin_headers)
    assert r.status_code == 204
    assert db[schema.NEWS].count_documents({}) == 0


def test_unknown_and_malformed_ids_are_404(client, admin_headers):
    for path in ("/news/detail/not-an-id", f"/news/detail/{ObjectId()}", f"/news/detail-full/{ObjectId()}"):
        r = client.get(path)
        assert r.status_code == 404
        assert r.json()["error"]["status"] == 404
    r = client.delete(f"/news/admin/news/delete/{ObjectId()}", headers=admin_headers)
    assert r.status_code == 404


def test_list_filters_and_paginates(client, admin_headers):
    _create_news(client, admin_headers, **{"vi[title]": "Hội chợ nông sản"})
    _create_news(client, admin_headers, **{"visible": "false"})
    _create_news(client, admin_headers)

    body = client.get("/news/").json()
    assert body["filteredCount"] == 3
    assert len(body["newss"]) == 3

    body = client.get("/news/", params={"keyword": "nông sản"}).json()
    assert body["filteredCount"] == 1

    body = client.get("/news/", params={"visible": "true", "limit": 1, "page": 2}).json()
    assert body["filteredCount"] == 2
    assert len(body["newss"]) == 1


def test_list_filters_by_day_range(client, admin_headers):
    _create_news(client, admin_headers)
    _create_news(client, admin_headers, day="06/01/2024")

    # the query string the public site builds for its year filter
    body = client.get("/news?sortBy=day&&orderBy=desc&&day[gte]=2023/1/1&&day[lte]=2023/12/31").json()
    assert body["filteredCount"] == 1
    assert body["newss"][0]["day"].startswith("2023-03-15")

    body = client.get("/news/", params={"day[gte]": "2023-01-01", "sortBy": "day", "orderBy": "desc"}).json()
    assert body["filteredCount"] == 2
    assert body["newss"][0]["day"].startswith("2024-06-01")

    assert client.get("/news/", params={"day": "2024-06-01"}).json()["filteredCount"] == 1
    assert client.get("/news/", params={"day[gte]": "2025/1/1"}).json()["filteredCount"] == 0

    r = client.get("/news/", params={"day[gte]": "someday"})
    assert r.status_code == 400


def test_read_during_update_does_not_recache_old_detail(client, monkeypatch, admin_headers):
    news_id = _create_news(client, admin_headers)
    assert client.get(f"/news/detail-full/{news_id}").json()["newsDetail"]["vi"]["title"] == "Tin tức"

    real_save = parents.save_upload

    def save_while_reading(*args, **kwargs):
        client.get(f"/news/detail-full/{news_id}")
        return real_save(*args, **kwargs)

    monkeypatch.setattr(parents, "save_upload", save_while_reading)
    r = client.post(
        f"/news/admin/news/update/{news_id}",
        data={"vi[title]": "Tiêu đề mới"},
        files=[("viPoster", upload("vi2.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 200

    body = client.get(f"/news/detail-full/{news_id}").json()
    assert body["newsDetail"]["vi"]["title"] == "Tiêu đề mới"


def test_concurrent_item_creates_keep_both_references(client, db, monkeypatch, admin_headers):
    news_id = _create_news(client, admin_headers)
    real_save = parents.save_upload
    started = []

    def save_with_second_create(*args, **kwargs):
        if not started:
            started.append(True)
            _add_item(client, admin_headers, news_id, content="Song song")
        return real_save(*args, **kwargs)

    monkeypatch.setattr(parents, "save_upload", save_with_second_create)
    _add_item(client, admin_headers, news_id)
    monkeypatch.setattr(parents, "save_upload", real_save)

    refs = db[schema.NEWS].find_one({"_id": ObjectId(news_id)})["vi"]["news"]
    assert db[schema.NEWS_ITEMS].count_documents({}) == 2
    assert {r["id"] for r in refs} == {d["_id"] for d in db[schema.NEWS_ITEMS].find()}

    first, second = (str(r["id"]) for r in refs)
    assert client.delete(f"/news/admin/news-item/delete/{news_id}/{first}", headers=admin_headers).status_code == 204
    refs = db[schema.NEWS].find_one({"_id": ObjectId(news_id)})["vi"]["news"]
    assert [str(r["id"]) for r in refs] == [second]


def test_item_created_during_parent_update_keeps_its_reference(client, db, monkeypatch, admin_headers):
    news_id = _create_news(client, admin_headers)
    real_save = parents.save_upload
    started = []

    def save_with_item_create(*args, **kwargs):
        if not started:
            started.append(True)
            monkeypatch.setattr(parents, "save_upload", real_save)
            _add_item(client, admin_headers, news_id)
        return real_save(*args, **kwargs)

    monkeypatch.setattr(parents, "save_upload", save_with_item_create)
    r = client.post(
        f"/news/admin/news/update/{news_id}",
        data={"vi[title]": "Mới"},
        files=[("viPoster", upload("vi2.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 200

    doc = db[schema.NEWS].find_one({"_id": ObjectId(news_id)})
    assert doc["vi"]["title"] == "Mới"
    assert len(doc["vi"]["news"]) == 1
