from app.core.config import settings
from app.models import Approval, Resource
from app.services import approval_engine as engine_module
from conftest import ADMIN_ID, ALICE_ID


def _upload(client, category="formulas", name="datasheet.pdf", content=b"%PDF-1.4 test", mime="application/pdf", uploaded_by=ALICE_ID):
    return client.post(
        "/api/resources/upload",
        files={"file": (name, content, mime)},
        data={"category": category, "uploaded_by": str(uploaded_by), "description": "test file"},
    )


def _stored_files(storage):
    return sorted(p.relative_to(storage.root).as_posix() for p in storage.root.rglob("*") if p.is_file())


def test_requires_token(client, auth):
    auth.logout()
    response = client.get("/api/resources/")
    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.headers["www-authenticate"] == "Bearer"


def test_upload_pending_for_regular_user(client, db, storage):
    response = _upload(client)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["approval_status"] == "Pending"
    assert data["category"] == "formulas"
    assert data["file_type"] == "PDF Document"
    assert data["file_size"] == "13 Bytes"
    assert data["uploader_name"] == "alice"
    assert data["file_url"].startswith("http://testserver/uploads/formulas/datasheet-")

    files = _stored_files(storage)
    assert len(files) == 1 and files[0].startswith("formulas/datasheet-")

    approvals = db.query(Approval).filter(Approval.entity_type == "Resource").all()
    assert len(approvals) == 1
    assert approvals[0].entity_id == data["id"]
    assert approvals[0].decision == "Pending"


def test_upload_knowledge_is_auto_approved(client, db):
    response = _upload(client, category="knowledge", name="guide.txt", content=b"hello", mime="text/plain")
    assert response.status_code == 201
    assert response.json()["data"]["approval_status"] == "Approved"
    assert db.query(Approval).count() == 0


def test_upload_by_admin_is_auto_approved(client, auth, db):
    auth.login_admin()
    response = _upload(client, category="quotes", uploaded_by=ADMIN_ID)
    assert response.json()["data"]["approval_status"] == "Approved"
    assert response.json()["data"]["approved_by"] == ADMIN_ID
    assert db.query(Approval).count() == 0


def test_upload_unknown_category_goes_to_other(client, storage):
    response = _upload(client, category="misc")
    assert response.json()["data"]["category"] == "other"
    assert _stored_files(storage)[0].startswith("other/")


def test_upload_rejects_zip_before_anything_is_written(client, db, storage):
    response = _upload(client, name="bundle.zip", content=b"PK", mime="application/zip")
    assert response.status_code == 400
    assert "PDF, Excel, Word, Text, CSV, Images" in response.json()["error"]
    assert db.query(Resource).count() == 0
    assert db.query(Approval).count() == 0
    assert _stored_files(storage) == []


def test_upload_too_large(client, db, storage, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)
    response = _upload(client, content=b"12345")
    assert response.status_code == 413
    assert db.query(Resource).count() == 0
    assert _stored_files(storage) == []


def test_upload_removes_file_when_insert_fails(client, storage, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(engine_module.approval_engine, "create_resource", boom)
    response = _upload(client)
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}
    assert _stored_files(storage) == []


def test_reject_with_non_numeric_approver_is_rejected_without_mutation(client, auth, db):
    resource_id = _upload(client).json()["data"]["id"]
    auth.login_admin()

    response = client.post(f"/api/resources/{resource_id}/reject", json={"approver_id": "abc"})
    assert response.status_code == 400
    assert response.json()["success"] is False

    db.expire_all()
    assert db.get(Resource, resource_id).approval_status == "Pending"
    assert db.query(Approval).one().decision == "Pending"


def test_approve_requires_approve_capability(client):
    resource_id = _upload(client).json()["data"]["id"]
    response = client.post(f"/api/resources/{resource_id}/approve", json={"approver_id": ADMIN_ID})
    assert response.status_code == 403


def test_approve_and_reject_flow(client, auth, db):
    first = _upload(client).json()["data"]["id"]
    second = _upload(client, name="other.pdf").json()["data"]["id"]
    auth.login_admin()

    approved = client.post(f"/api/resources/{first}/approve", json={"approver_id": ADMIN_ID})
    assert approved.status_code == 200
    assert approved.json()["data"]["approval_status"] == "Approved"
    assert approved.json()["data"]["approver_name"] == "admin"

    rejected = client.post(f"/api/resources/{second}/reject", json={"approver_id": ADMIN_ID, "comments": "blurry"})
    assert rejected.json()["data"]["approval_status"] == "Rejected"

    decisions = {a.entity_id: (a.decision, a.comments) for a in db.query(Approval).all()}
    assert decisions[first][0] == "Approved"
    assert decisions[second] == ("Rejected", "blurry")

    missing = client.post("/api/resources/999/approve", json={"approver_id": ADMIN_ID})
    assert missing.status_code == 404


def test_list_shows_only_approved(client, auth):
    _upload(client, name="pending.pdf")
    _upload(client, category="knowledge", name="kb.pdf")

    listing = client.get("/api/resources/").json()
    assert listing["count"] == 1
    assert listing["data"][0]["file_name"] == "kb.pdf"

    assert client.get("/api/resources/?search=kb").json()["count"] == 1
    assert client.get("/api/resources/?category=formulas").json()["count"] == 0

    auth.login_admin()
    pending = client.get("/api/resources/pending").json()
    assert [r["file_name"] for r in pending["data"]] == ["pending.pdf"]


def test_pending_list_requires_capability(client):
    assert client.get("/api/resources/pending").status_code == 403


def test_stats(client):
    _upload(client, category="knowledge", name="a.pdf")
    _upload(client, category="knowledge", name="b.pdf")
    _upload(client, category="quotes", name="c.pdf")
    data = client.get("/api/resources/stats").json()["data"]
    assert data["total"] == 3
    counts = {row["category"]: row["count"] for row in data["byCategory"]}
    assert counts == {"formulas": 0, "quotes": 1, "knowledge": 2, "other": 0}


def test_create_from_metadata(client, db):
    response = client.post(
        "/api/resources/",
        json={
            "file_name": "link.pdf",
            "file_type": "PDF Document",
            "file_size": "2 MB",
            "file_url": "http://files.example.com/uploads/other/link.pdf",
            "uploaded_by": ALICE_ID,
        },
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["category"] == "other"
    assert data["approval_status"] == "Pending"

    bad = client.post("/api/resources/", json={"file_name": "x"})
    assert bad.status_code == 400


def test_get_update_and_404(client):
    resource_id = _upload(client).json()["data"]["id"]
    assert client.get(f"/api/resources/{resource_id}").json()["data"]["id"] == resource_id
    assert client.get("/api/resources/999").status_code == 404

    updated = client.put(f"/api/resources/{resource_id}", json={"description": "new", "category": "Quotes"})
    assert updated.json()["data"]["description"] == "new"
    assert updated.json()["data"]["category"] == "quotes"


def test_download_falls_back_to_actual_category(client, storage):
    data = _upload(client, content=b"payload").json()["data"]
    relative = storage.relative_path_from_url(data["file_url"])
    filename = relative.split("/")[1]
    (storage.root / relative).rename(storage.root / "knowledge" / filename)

    response = client.get(f"/api/resources/{data['id']}/download")
    assert response.status_code == 200
    assert response.content == b"payload"
    assert "datasheet.pdf" in response.headers["content-disposition"]


def test_download_missing_file(client, storage):
    data = _upload(client).json()["data"]
    storage.delete(storage.relative_path_from_url(data["file_url"]))
    assert client.get(f"/api/resources/{data['id']}/download").status_code == 404


def test_delete_removes_row_and_file(client, db, storage):
    resource_id = _upload(client).json()["data"]["id"]
    assert len(_stored_files(storage)) == 1

    response = client.delete(f"/api/resources/{resource_id}")
    assert response.status_code == 200
    assert db.query(Resource).count() == 0
    assert _stored_files(storage) == []


def test_delete_succeeds_when_file_already_gone(client, db, storage):
    data = _upload(client).json()["data"]
    storage.delete(storage.relative_path_from_url(data["file_url"]))
    assert client.delete(f"/api/resources/{data['id']}").json()["success"] is True
    assert db.query(Resource).count() == 0


def test_reconcile_requires_capability(client):
    assert client.post("/api/resources/reconcile").status_code == 403


def test_delete_discards_pending_approval(client, auth, db):
    resource_id = _upload(client).json()["data"]["id"]
    auth.login_admin()
    assert client.get("/api/approvals/stats/pending").json()["data"]["pending_count"] == 1

    assert client.delete(f"/api/resources/{resource_id}").status_code == 200
    assert client.get("/api/approvals/stats/pending").json()["data"]["pending_count"] == 0
    assert db.query(Approval).count() == 0


def test_upload_without_uploader_records_caller(client, db):
    response = client.post(
        "/api/resources/upload",
        files={"file": ("datasheet.pdf", b"%PDF-1.4 test", "application/pdf")},
        data={"category": "formulas"},
    )
    assert response.status_code == 201
    assert response.json()["data"]["uploaded_by"] == ALICE_ID
    assert db.query(Approval).one().approver_id == ALICE_ID


def test_upload_without_uploader_or_linked_user_is_rejected(client, auth, db, storage):
    auth.principal.user_id = None
    response = client.post(
        "/api/resources/upload",
        files={"file": ("datasheet.pdf", b"%PDF-1.4 test", "application/pdf")},
        data={"category": "formulas"},
    )
    assert response.status_code == 400
    assert "uploaded_by" in response.json()["error"]
    assert db.query(Resource).count() == 0
    assert _stored_files(storage) == []


def test_approve_without_approver_records_caller(client, auth, db):
    resource_id = _upload(client).json()["data"]["id"]
    auth.login_admin()

    approved = client.post(f"/api/resources/{resource_id}/approve", json={})
    assert approved.status_code == 200
    assert approved.json()["data"]["approved_by"] == ADMIN_ID
    assert db.query(Approval).one().approver_id == ADMIN_ID


def test_approve_without_approver_or_linked_user_is_rejected(client, auth, db):
    resource_id = _upload(client).json()["data"]["id"]
    auth.login_admin().user_id = None

    response = client.post(f"/api/resources/{resource_id}/approve", json={})
    assert response.status_code == 400
    db.expire_all()
    assert db.get(Resource, resource_id).approval_status == "Pending"
