from app.models import Approval
from conftest import ADMIN_ID, ALICE_ID


def _formula(client):
    return client.post("/api/formulas/", json={"formula_name": "Base", "created_by": ALICE_ID}).json()["data"]["id"]


def test_quote_crud(client):
    formula_id = _formula(client)
    created = client.post(
        "/api/quotes/",
        json={"formula_id": formula_id, "created_by": ALICE_ID, "customer_name": "Acme", "total_price": 250.5},
    )
    assert created.status_code == 201
    data = created.json()["data"]
    assert data["status"] == "Draft"
    assert data["formula_name"] == "Base"
    assert data["creator_name"] == "alice"

    quote_id = data["id"]
    updated = client.put(f"/api/quotes/{quote_id}", json={"status": "Pending_Approval"})
    assert updated.json()["data"]["status"] == "Pending_Approval"

    listing = client.get("/api/quotes/?status=Pending_Approval").json()
    assert listing["pagination"]["total"] == 1

    assert client.delete(f"/api/quotes/{quote_id}").status_code == 200
    assert client.get(f"/api/quotes/{quote_id}").status_code == 404


def test_quote_policy_and_decisions(client, auth):
    pending = client.post("/api/quotes/", json={"customer_name": "Acme", "status": "Pending_Approval"})
    assert pending.json()["data"]["status"] == "Pending_Approval"
    quote_id = pending.json()["data"]["id"]

    auth.login_admin()
    auto = client.post("/api/quotes/", json={"customer_name": "Beta", "status": "Pending_Approval"})
    assert auto.json()["data"]["status"] == "Approved"

    rejected = client.post(f"/api/quotes/{quote_id}/reject", json={"approver_id": ADMIN_ID})
    assert rejected.json()["data"]["status"] == "Rejected"
    assert client.post("/api/quotes/999/approve", json={"approver_id": ADMIN_ID}).status_code == 404


def test_invalid_status_is_rejected(client):
    assert client.post("/api/quotes/", json={"status": "Pending"}).status_code == 400


def test_templates(client):
    client.post("/api/quotes/templates", json={"template_name": "Standard", "is_default": True})
    second = client.post("/api/quotes/templates", json={"template_name": "Alt", "is_default": True})
    assert second.status_code == 201

    templates = client.get("/api/quotes/templates").json()
    assert templates["count"] == 2
    defaults = [t["template_name"] for t in templates["data"] if t["is_default"]]
    assert defaults == ["Alt"]


def test_delete_discards_pending_approval(client, db):
    quote_id = client.post("/api/quotes/", json={"customer_name": "Acme", "status": "Pending_Approval"}).json()["data"]["id"]
    client.post("/api/approvals/", json={"entity_type": "Quote", "entity_id": quote_id, "approver_id": ALICE_ID})
    assert client.get("/api/approvals/stats/pending").json()["data"]["pending_count"] == 1

    assert client.delete(f"/api/quotes/{quote_id}").status_code == 200
    assert client.get("/api/approvals/stats/pending").json()["data"]["pending_count"] == 0
    assert db.query(Approval).count() == 0


def test_reject_without_approver_uses_caller(client, auth, db):
    quote_id = client.post("/api/quotes/", json={"customer_name": "Acme", "status": "Pending_Approval"}).json()["data"]["id"]
    client.post("/api/approvals/", json={"entity_type": "Quote", "entity_id": quote_id, "approver_id": ALICE_ID})
    auth.login_admin()

    rejected = client.post(f"/api/quotes/{quote_id}/reject", json={"comments": "too expensive"})
    assert rejected.json()["data"]["status"] == "Rejected"
    row = db.query(Approval).one()
    assert (row.decision, row.approver_id, row.comments) == ("Rejected", ADMIN_ID, "too expensive")
