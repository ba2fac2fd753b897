from __future__ import annotations

from pathlib import Path

from bson import ObjectId

from vnjp_cms import schema

from conftest import stored_files, upload


PERSONNEL_FIELDS = {
    "visible": "true",
    "vi[department]": "Kỹ thuật",
    "vi[title]": "Trưởng phòng",
    "vi[content]": "Giới thiệu",
    "vi[possition]": "Quản lý",
    "vi[name]": "Trần Văn A",
    "jp[department]": "技術部",
    "jp[title]": "部長",
    "jp[content]": "紹介",
    "jp[possition]": "管理",
    "jp[name]": "チャン・ヴァン・A",
}


def test_personnel_lifecycle(client, db, cfg, admin_headers):
    r = client.post("/personnel/admin/create", data=PERSONNEL_FIELDS, headers=admin_headers)
    assert r.status_code == 400
    assert db[schema.PERSONNELS].count_documents({}) == 0

    r = client.post(
        "/personnel/admin/create",
        data=PERSONNEL_FIELDS,
        files=[("file", upload("avatar.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 201
    doc = db[schema.PERSONNELS].find_one({})
    personnel_id = str(doc["_id"])
    old_avatar = Path(doc["avatar"])
    assert old_avatar.parent == Path(cfg.UPLOAD_DIR) / "personnels"

    body = client.get("/personnel/", params={"keyword": "Trần"}).json()
    assert body["filteredCount"] == 1
    assert body["personnels"][0]["vi"]["name"] == "Trần Văn A"
    assert client.get(f"/personnel/admin/{personnel_id}").json()["personnel"]["_id"] == personnel_id

    r = client.post(
        f"/personnel/admin/update/{personnel_id}",
        data={"vi[title]": "Giám đốc"},
        files=[("file", upload("new.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 200
    doc = db[schema.PERSONNELS].find_one({"_id": ObjectId(personnel_id)})
    assert doc["vi"]["title"] == "Giám đốc"
    assert doc["vi"]["name"] == "Trần Văn A"
    assert not old_avatar.exists()
    assert Path(doc["avatar"]).exists()

    r = client.delete(f"/personnel/admin/delete/{personnel_id}", headers=admin_headers)
    assert r.status_code == 204
    assert db[schema.PERSONNELS].count_documents({}) == 0
    assert stored_files(cfg) == []


def test_partner_and_cooperative_use_image_field(client, db, admin_headers):
    for prefix, collection, plural in (
        ("/partner", schema.PARTNERS, "partners"),
        ("/cooperative", schema.COOPERATIVES, "cooperatives"),
    ):
        r = client.post(f"{prefix}/admin/create", data={"visible": "true"}, files=[("file", upload("logo.png"))], headers=admin_headers)
        assert r.status_code == 201
        doc = db[collection].find_one({})
        assert doc["image"].endswith("logo.png")
        assert client.get(f"{prefix}/").json()[plural][0]["image"] == doc["image"]

        r = client.post(f"{prefix}/admin/update/{doc['_id']}", data={"visible": "false"}, headers=admin_headers)
        assert r.status_code == 200
        updated = db[collection].find_one({"_id": doc["_id"]})
        assert updated["visible"] is False
        assert updated["image"] == doc["image"]


def test_feedback_detail_and_validation(client, db, admin_headers):
    data = {"vi[name]": "Khách hàng", "vi[content]": "Tốt", "jp[name]": "お客様", "jp[content]": "良い"}
    r = client.post("/feedback/admin/create", data=data, files=[("file", upload("face.png"))], headers=admin_headers)
    assert r.status_code == 201
    feedback_id = str(db[schema.FEEDBACKS].find_one({})["_id"])
    assert client.get(f"/feedback/admin/{feedback_id}").json()["feedback"]["vi"]["content"] == "Tốt"

    r = client.post(
        "/feedback/admin/create",
        data={"vi[name]": "Thiếu"},
        files=[("file", upload("face.png"))],
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert db[schema.FEEDBACKS].count_documents({}) == 1


def _contact(address: str, default: bool = False):
    return {
        "default": default,
        "vi": {"address": address, "phone": "0123456789", "email": "vp@example.com"},
        "jp": {"address": address, "phone": "0123456789", "email": "jp@example.com"},
    }


def test_exactly_one_default_contact(client, db, admin_headers):
    assert client.post("/contact/admin/create", json=_contact("Hà Nội"), headers=admin_headers).status_code == 201
    first = db[schema.CONTACTS].find_one({"vi.address": "Hà Nội"})
    assert first["default"] is True

    # the default contact cannot be unset directly
    r = client.post(f"/contact/admin/update/{first['_id']}", json={"default": False}, headers=admin_headers)
    assert r.status_code == 406

    assert client.post("/contact/admin/create", json=_contact("Tokyo", default=True), headers=admin_headers).status_code == 201
    second = db[schema.CONTACTS].find_one({"vi.address": "Tokyo"})
    assert second["default"] is True
    assert db[schema.CONTACTS].find_one({"_id": first["_id"]})["default"] is False
    assert db[schema.CONTACTS].count_documents({"default": True}) == 1

    assert client.delete(f"/contact/admin/delete/{second['_id']}", headers=admin_headers).status_code == 406

    r = client.post(f"/contact/admin/update/{first['_id']}", json={"default": True}, headers=admin_headers)
    assert r.status_code == 200
    assert db[schema.CONTACTS].count_documents({"default": True}) == 1
    assert db[schema.CONTACTS].find_one({"_id": second["_id"]})["default"] is False

    assert client.delete(f"/contact/admin/delete/{second['_id']}", headers=admin_headers).status_code == 204

    body = client.get("/contact/").json()
    assert body["filteredCount"] == 1
    assert body["contacts"][0]["default"] is True
    assert client.get(f"/contact/admin/{first['_id']}").json()["contact"]["vi"]["address"] == "Hà Nội"


def test_recruit_email_attaches_cv(client, cfg, mailer):
    data = {
        "name": "Lê Thị B",
        "address": "Đà Nẵng",
        "gender": "Nữ",
        "birthday": "1999",
        "major": "Nông nghiệp",
        "phone": "0912345678",
        "email": "b@example.com",
        "content": "Xin ứng tuyển",
    }
    r = client.post("/email/recruit", data={**data, "phone": "12345"}, files=[("file", upload("cv.pdf", b"%PDF", "application/pdf"))])
    assert r.status_code == 422
    assert mailer.sent == []

    r = client.post("/email/recruit", data=data, files=[("file", upload("cv.pdf", b"%PDF", "application/pdf"))])
    assert r.status_code == 200
    assert len(mailer.sent) == 1
    message = mailer.sent[0]
    assert message["to"] == "inbox@example.com"
    assert "Lê Thị B" in message["subject"]
    assert message["attachments"][0].filename == "cv.pdf"
    assert Path(message["attachments"][0].path).parent == Path(cfg.UPLOAD_DIR) / "recruits"


def test_contact_email(client, mailer):
    body = {
        "name": "Công ty C",
        "company": "C Corp",
        "address": "Huế",
        "phone": "0987654321",
        "email": "c@example.com",
        "content": "<b>Xin chào</b>",
    }
    r = client.post("/email/contact", json=body)
    assert r.status_code == 200
    assert mailer.sent[0]["to"] == "inbox@example.com"
    assert "&lt;b&gt;Xin chào&lt;/b&gt;" in mailer.sent[0]["html"]

    r = client.post("/email/contact", json={**body, "email": "nope"})
    assert r.status_code == 422
    assert r.json()["error"]["status"] == 422
