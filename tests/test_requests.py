from datetime import datetime, timedelta, timezone

from conftest import quote_payload, register, request_payload


def _create(client, headers, **overrides):
    resp = client.post("/requests/", json=request_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["request"]


def test_client_creates_request_with_addresses(client):
    owner = register(client, "client", name="Carla", phone="11911112222")
    created = _create(client, owner["headers"])

    assert created["status"] == "pending"
    assert created["client_id"] == owner["user"]["id"]
    assert created["origin"]["kind"] == "origin"
    assert created["origin"]["state"] == "SP"
    assert created["destination"]["kind"] == "destination"
    assert created["destination"]["city"] == "Rio de Janeiro"
    assert created["client"]["name"] == "Carla"


def test_company_cannot_create_request(client):
    company = register(client, "company")
    resp = client.post("/requests/", json=request_payload(), headers=company["headers"])
    assert resp.status_code == 403


def test_move_date_in_the_past_is_rejected(client):
    owner = register(client, "client")
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    resp = client.post("/requests/", json=request_payload(move_date=past), headers=owner["headers"])
    assert resp.status_code == 422


def test_invalid_cep_is_rejected(client):
    owner = register(client, "client")
    payload = request_payload()
    payload["origin_address"]["cep"] = "123"
    resp = client.post("/requests/", json=payload, headers=owner["headers"])
    assert resp.status_code == 422
    assert any("cep" in err["loc"] for err in resp.json()["detail"])


def test_client_lists_only_own_requests_newest_first(client):
    alice = register(client, "client")
    bob = register(client, "client")
    first = _create(client, alice["headers"], description="first")
    second = _create(client, alice["headers"], description="second")
    _create(client, bob["headers"], description="bob's")

    resp = client.get("/requests/", headers=alice["headers"])
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == [second["id"], first["id"]]


def test_company_lists_only_pending_requests_with_client_contact(client):
    owner = register(client, "client", name="Joana", phone="11900001111")
    company = register(client, "company")
    open_request = _create(client, owner["headers"])
    taken = _create(client, owner["headers"])

    quote = client.post("/quotes/", json=quote_payload(taken["id"]), headers=company["headers"]).json()["quote"]
    client.patch(f"/quotes/{quote['id']}/status", json={"status": "accepted"}, headers=owner["headers"])

    listed = client.get("/requests/", headers=company["headers"]).json()
    assert [r["id"] for r in listed] == [open_request["id"]]
    assert listed[0]["client"] == {"id": owner["user"]["id"], "name": "Joana", "phone": "11900001111"}


def test_get_request_by_id(client):
    owner = register(client, "client")
    created = _create(client, owner["headers"])
    resp = client.get(f"/requests/{created['id']}", headers=owner["headers"])
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]


def test_get_missing_request_is_not_found(client):
    owner = register(client, "client")
    resp = client.get("/requests/404", headers=owner["headers"])
    assert resp.status_code == 404


def test_other_client_cannot_view_request(client):
    owner = register(client, "client")
    stranger = register(client, "client")
    created = _create(client, owner["headers"])
    resp = client.get(f"/requests/{created['id']}", headers=stranger["headers"])
    assert resp.status_code == 403


def test_company_can_view_request_in_progress(client):
    owner = register(client, "client")
    company = register(client, "company")
    created = _create(client, owner["headers"])
    quote = client.post("/quotes/", json=quote_payload(created["id"]), headers=company["headers"]).json()["quote"]
    client.patch(f"/quotes/{quote['id']}/status", json={"status": "accepted"}, headers=owner["headers"])

    resp = client.get(f"/requests/{created['id']}", headers=company["headers"])
    assert resp.status_code == 200
    assert resp.json()["status"] == "in_progress"


def test_out_of_range_request_id_is_rejected(client):
    owner = register(client, "client")
    resp = client.get("/requests/99999999999999999999999", headers=owner["headers"])
    assert resp.status_code == 422
