from app.models import Resource
from app.services.resource_reconciler import reconcile_resource_urls
from conftest import ALICE_ID


def _resource(db, storage, url_category, disk_category, name="doc.pdf", column_category=None):
    relative = storage.save(disk_category, name, b"data")
    filename = relative.split("/")[1]
    resource = Resource(
        file_name=name,
        file_type="PDF Document",
        file_size="4 Bytes",
        file_url=f"http://files.local/uploads/{url_category}/{filename}",
        category=column_category or url_category,
        uploaded_by=ALICE_ID,
        approval_status="Approved",
    )
    db.add(resource)
    db.commit()
    return resource, filename


def test_reconcile_fixes_drifted_urls_and_is_idempotent(db, seed, storage):
    moved, moved_name = _resource(db, storage, "formulas", "knowledge")
    fine, _ = _resource(db, storage, "quotes", "quotes", name="ok.pdf")
    stale_column, _ = _resource(db, storage, "other", "other", name="col.pdf", column_category="quotes")

    report = reconcile_resource_urls(db, storage)
    assert report["checked"] == 3
    assert {fix["id"] for fix in report["fixed"]} == {moved.id, stale_column.id}
    assert report["missing"] == []

    db.refresh(moved)
    assert moved.category == "knowledge"
    assert moved.file_url == f"http://files.local/uploads/knowledge/{moved_name}"
    db.refresh(stale_column)
    assert stale_column.category == "other"
    db.refresh(fine)
    assert fine.category == "quotes"

    second = reconcile_resource_urls(db, storage)
    assert second["fixed"] == []
    assert second["checked"] == 3


def test_reconcile_reports_missing_files(db, seed, storage):
    resource = Resource(
        file_name="gone.pdf",
        file_type="PDF Document",
        file_size="1 KB",
        file_url="http://files.local/uploads/other/gone-1-2.pdf",
        category="other",
        uploaded_by=ALICE_ID,
    )
    db.add(resource)
    db.commit()

    report = reconcile_resource_urls(db, storage)
    assert report["missing"] == [{"id": resource.id, "file_url": resource.file_url}]
    assert report["fixed"] == []


def test_reconcile_endpoint(client, auth, db, storage):
    resource, _ = _resource(db, storage, "quotes", "formulas")
    auth.login_admin()
    response = client.post("/api/resources/reconcile")
    assert response.status_code == 200
    assert [fix["id"] for fix in response.json()["data"]["fixed"]] == [resource.id]
