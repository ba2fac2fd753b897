from __future__ import annotations

from pathlib import Path

from bson import ObjectId

from vnjp_cms import schema

from conftest import stored_files, upload


def _agriculture_fields(vi_tags=("Lúa gạo",), jp_tags=("米",)):
    data = {
        "visible": "true",
        "day": "06/01/2022",
        "vi[title]": "Canh tác lúa",
        "vi[author]": "Nguyễn",
        "vi[description]": "Bài viết",
        "vi[tag][]": list(vi_tags),
        "jp[title]": "稲作",
        "jp[author]": "グエン",
        "jp[description]": "記事",
        "jp[tag][]": list(jp_tags),
    }
    return data


def _create(client, headers, **kwargs):
    r = client.post(
        "/agriculture/admin/agriculture/create",
        data=_agriculture_fields(**kwargs),
        files=[("viPoster", upload("vi.png")), ("jpPoster", upload("jp.png"))],
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


def test_create_parses_tag_lists(client, db, admin_headers):
    agriculture_id = _create(client, admin_headers, vi_tags=("Lúa gạo", "Rau"))
    doc = db[schema.AGRICULTURES].find_one({"_id": ObjectId(agriculture_id)})
    assert doc["vi"]["tag"] == ["Lúa gạo", "Rau"]
    assert doc["jp"]["tag"] == ["米"]
    assert doc["vi"]["agriculture"] == []


def test_detail_resolves_tags_by_name(client, admin_headers):
    r = client.post("/agriculture/admin/tag/create", data={"vi": "Lúa gạo", "jp": "米", "visible": "true"}, headers=admin_headers)
    assert r.status_code == 201
    agriculture_id = _create(client, admin_headers)

    body = client.get(f"/agriculture/detail/{agriculture_id}").json()
    assert body["agriculture"]["_id"] == agriculture_id
    assert [t["vi"] for t in body["viTag"]] == ["Lúa gạo"]
    assert [t["jp"] for t in body["jpTag"]] == ["米"]


def test_list_by_language_and_tag(client, admin_headers):
    _create(client, admin_headers, vi_tags=("Lúa gạo",))
    _create(client, admin_headers, vi_tags=("Rau",))

    assert client.get("/agriculture/").json()["filteredCount"] == 2
    body = client.get("/agriculture/vi/Rau").json()
    assert body["filteredCount"] == 1
    assert body["agricultures"][0]["vi"]["tag"] == ["Rau"]
    assert client.get("/agriculture/jp/米").json()["filteredCount"] == 2
    assert client.get("/agriculture/en/Rau").status_code == 400


def test_items_and_full_detail(client, db, store, admin_headers):
    agriculture_id = _create(client, admin_headers)
    r = client.post(
        f"/agriculture/admin/agriculture-item/create/vi/{agriculture_id}",
        data={"title": "Bước 1", "topContent": "Gieo hạt"},
        files=[("image", upload("step.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 200

    body = client.get(f"/agriculture/detail-full/{agriculture_id}").json()
    assert body["agricultureDetail"]["_id"] == agriculture_id
    assert [i["title"] for i in body["agricultureVi"]] == ["Bước 1"]
    assert body["agricultureJp"] == []
    assert store.get(f"AGRICULTURE_KEY{agriculture_id}") is not None

    item_id = body["agricultureVi"][0]["_id"]
    assert client.get(f"/agriculture/agriculture-item/detail/{item_id}").json()["agricultureItem"]["title"] == "Bước 1"

    r = client.post(
        f"/agriculture/admin/agriculture-item/update/{agriculture_id}/{item_id}",
        data={"title": "Bước một"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert store.get(f"AGRICULTURE_KEY{agriculture_id}") is None
    item = db[schema.AGRICULTURE_ITEMS].find_one({"_id": ObjectId(item_id)})
    assert item["title"] == "Bước một"
    assert item["image"] is None


def test_update_and_delete(client, db, store, cfg, admin_headers):
    agriculture_id = _create(client, admin_headers)
    client.post(
        f"/agriculture/admin/agriculture-item/create/jp/{agriculture_id}",
        data={"title": "一"},
        files=[("pdf", upload("a.pdf", b"%PDF", "application/pdf"))],
        headers=admin_headers,
    )
    client.get(f"/agriculture/detail-full/{agriculture_id}")

    r = client.post(
        f"/agriculture/admin/agriculture/update/{agriculture_id}",
        data={"jp[title]": "新しい稲作"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert store.get(f"AGRICULTURE_KEY{agriculture_id}") is None
    doc = db[schema.AGRICULTURES].find_one({"_id": ObjectId(agriculture_id)})
    assert doc["jp"]["title"] == "新しい稲作"
    assert len(doc["jp"]["agriculture"]) == 1

    r = client.delete(f"/agriculture/admin/agriculture/delete/{agriculture_id}", headers=admin_headers)
    assert r.status_code == 204
    assert db[schema.AGRICULTURES].count_documents({}) == 0
    assert db[schema.AGRICULTURE_ITEMS].count_documents({}) == 0
    assert stored_files(cfg) == []


def test_tag_crud(client, db, admin_headers):
    r = client.post("/agriculture/admin/tag/create", data={"vi": "Rau", "jp": "野菜"}, headers=admin_headers)
    assert r.status_code == 201
    tag = db[schema.TAGS].find_one({"vi": "Rau"})
    tag_id = str(tag["_id"])
    assert tag["visible"] is False

    r = client.post(f"/agriculture/admin/tag/update/{tag_id}", data={"visible": "true"}, headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"/agriculture/tag/detail/{tag_id}").json()["tag"]["visible"] is True

    body = client.get("/agriculture/tag/full/all", params={"visible": "true"}).json()
    assert body["filteredCount"] == 1
    assert body["tags"][0]["jp"] == "野菜"

    assert client.post("/agriculture/admin/tag/create", data={"vi": "Thiếu"}, headers=admin_headers).status_code == 400

    r = client.delete(f"/agriculture/admin/tag/delete/{tag_id}", headers=admin_headers)
    assert r.status_code == 204
    assert client.get(f"/agriculture/tag/detail/{tag_id}").status_code == 404


def test_poster_files_live_under_agricultures(client, db, cfg, admin_headers):
    agriculture_id = _create(client, admin_headers)
    doc = db[schema.AGRICULTURES].find_one({"_id": ObjectId(agriculture_id)})
    assert Path(doc["vi"]["poster"]).parent == Path(cfg.UPLOAD_DIR) / "agricultures"
