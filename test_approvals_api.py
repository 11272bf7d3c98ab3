from conftest import ADMIN_ID, ALICE_ID


def _pending_resource(client):
    return client.post(
        "/api/resources/upload",
        files={"file": ("sheet.csv", b"a,b", "text/csv")},
        data={"category": "quotes", "uploaded_by": str(ALICE_ID)},
    ).json()["data"]["id"]


def test_list_includes_names(client):
    resource_id = _pending_resource(client)
    formula_id = client.post("/api/formulas/", json={"formula_name": "Glue", "created_by": ALICE_ID}).json()["data"]["id"]
    quote_id = client.post("/api/quotes/", json={"customer_name": "Acme"}).json()["data"]["id"]
    client.post("/api/approvals/", json={"entity_type": "Formula", "entity_id": formula_id, "approver_id": ALICE_ID})
    client.post("/api/approvals/", json={"entity_type": "Quote", "entity_id": quote_id, "approver_id": ALICE_ID})

    body = client.get("/api/approvals/").json()
    assert body["count"] == 3
    names = {a["entity_type"]: a["entity_name"] for a in body["data"]}
    assert names == {"Resource": "sheet.csv", "Formula": "Glue", "Quote": "Quote for Acme"}
    assert {a["approver_name"] for a in body["data"]} == {"alice"}

    only_formulas = client.get("/api/approvals/?entity_type=Formula").json()
    assert only_formulas["count"] == 1
    assert client.get(f"/api/approvals/?approver_id={ADMIN_ID}").json()["count"] == 0
    assert client.get("/api/approvals/?entity_type=Invoice").status_code == 400

    resource_row = next(a for a in body["data"] if a["entity_type"] == "Resource")
    assert resource_row["entity_id"] == resource_id


def test_pending_count_and_duplicate_conflict(client):
    resource_id = _pending_resource(client)
    assert client.get("/api/approvals/stats/pending").json()["data"] == {"pending_count": 1}

    duplicate = client.post(
        "/api/approvals/",
        json={"entity_type": "Resource", "entity_id": resource_id, "approver_id": ALICE_ID},
    )
    assert duplicate.status_code == 409
    assert client.get("/api/approvals/stats/pending").json()["data"] == {"pending_count": 1}


def test_update_get_delete(client):
    _pending_resource(client)
    approval = client.get("/api/approvals/").json()["data"][0]

    updated = client.put(f"/api/approvals/{approval['id']}", json={"decision": "Returned", "comments": "needs work"})
    assert updated.status_code == 200
    assert updated.json()["data"]["decision"] == "Returned"
    assert updated.json()["data"]["comments"] == "needs work"

    assert client.get(f"/api/approvals/{approval['id']}").json()["data"]["decision"] == "Returned"
    assert client.put(f"/api/approvals/{approval['id']}", json={"comments": "x"}).status_code == 400
    assert client.put(f"/api/approvals/{approval['id']}", json={"decision": "Maybe"}).status_code == 400

    assert client.delete(f"/api/approvals/{approval['id']}").status_code == 200
    assert client.get(f"/api/approvals/{approval['id']}").status_code == 404
    assert client.delete(f"/api/approvals/{approval['id']}").status_code == 404
