import importlib
import logging
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from fansnap import api


class StubAssistant:
    def respond(self, message: str) -> str:
        return f"echo: {message}"


@pytest.fixture
def client(service):
    service.assistant = StubAssistant()
    api.app.dependency_overrides[api.get_service] = lambda: service
    with TestClient(api.app) as c:
        yield c
    api.app.dependency_overrides.clear()


def _register(client, username, role="subscriber", password="pw"):
    resp = client.post("/api/register", json={
        "username": username, "email": f"{username}@example.com", "password": password, "role": role,
    })
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]


def _as(user):
    return {"X-User-Id": user["id"]}


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_register_conflict_and_login(client):
    _register(client, "ana", "creator", password="hunter2")

    dup = client.post("/api/register", json={"username": "ana", "email": "x@example.com", "password": "pw"})
    assert dup.status_code == 409
    assert dup.json()["error"] == "conflict"

    ok = client.post("/api/login", json={"username": "ana", "password": "hunter2"})
    assert ok.status_code == 200
    assert ok.json()["user"]["username"] == "ana"

    bad = client.post("/api/login", json={"username": "ana", "password": "wrong"})
    assert bad.status_code == 401


def test_unknown_identity_header_unauthenticated(client):
    assert client.get("/api/profile", headers={"X-User-Id": "ghost"}).status_code == 401
    assert client.get("/api/profile").status_code == 401


def test_profile_update_ignores_mistyped_fields(client):
    ana = _register(client, "ana", "creator")
    resp = client.put("/api/profile", json={"bio": "Painter", "banner": 7}, headers=_as(ana))
    assert resp.status_code == 200
    profile = client.get("/api/profile", headers=_as(ana)).json()["user"]["profile"]
    assert profile["bio"] == "Painter"
    assert profile["banner"] == ""


def test_gated_posts_flow(client):
    ana = _register(client, "ana", "creator")
    bo = _register(client, "bo")

    assert client.post("/api/posts", json={"content": "free"}, headers=_as(ana)).status_code == 200
    assert client.post("/api/posts", json={"content": "gated", "subscriberOnly": True},
                       headers=_as(ana)).status_code == 200

    before = client.get("/api/posts/ana", headers=_as(bo)).json()["posts"]
    assert [p["content"] for p in before] == ["free"]
    anonymous = client.get("/api/posts/ana").json()["posts"]
    assert [p["content"] for p in anonymous] == ["free"]

    sub = client.post("/api/subscribe/ana", headers=_as(bo))
    assert sub.status_code == 200
    assert sub.json()["subscription"]["plan"] == "monthly"

    after = client.get("/api/posts/ana", headers=_as(bo)).json()["posts"]
    assert [p["content"] for p in after] == ["free", "gated"]


def test_only_creators_can_post(client):
    bo = _register(client, "bo")
    resp = client.post("/api/posts", json={"content": "hi"}, headers=_as(bo))
    assert resp.status_code == 403


def test_self_subscription_rejected(client):
    ana = _register(client, "ana", "creator")
    assert client.post("/api/subscribe/ana", headers=_as(ana)).status_code == 400


def test_cancel_requires_owner(client):
    _register(client, "ana", "creator")
    bo = _register(client, "bo")
    cy = _register(client, "cy")
    sub = client.post("/api/subscribe/ana", json={"plan": "yearly"}, headers=_as(bo)).json()["subscription"]
    assert sub["plan"] == "yearly"

    assert client.post(f"/api/subscriptions/{sub['id']}/cancel", headers=_as(cy)).status_code == 403
    resp = client.post(f"/api/subscriptions/{sub['id']}/cancel", headers=_as(bo))
    assert resp.json()["subscription"]["status"] == "cancelled"


def test_store_and_orders(client):
    ana = _register(client, "ana", "creator")
    bo = _register(client, "bo")

    forbidden = client.post("/api/store/ana", json={"name": "Print", "price": 10}, headers=_as(bo))
    assert forbidden.status_code == 403

    item = client.post("/api/store/ana", json={"name": "Print", "price": 10}, headers=_as(ana)).json()["item"]
    assert len(client.get("/api/store/ana").json()["items"]) == 1

    assert client.post(f"/api/order/{item['id']}", headers=_as(ana)).status_code == 400
    order = client.post(f"/api/order/{item['id']}", headers=_as(bo)).json()["order"]
    assert order["status"] == "pending"
    assert client.post("/api/order/missing", headers=_as(bo)).status_code == 404
    assert [o["id"] for o in client.get("/api/orders", headers=_as(bo)).json()["orders"]] == [order["id"]]


def test_referral_flow(client):
    ana = _register(client, "ana", "creator")
    dee = _register(client, "dee")

    created = client.post("/api/referral", json={"code": "REF1", "creatorId": ana["id"], "commission": 0.25},
                          headers=_as(dee))
    assert created.status_code == 200
    dup = client.post("/api/referral", json={"code": "REF1"}, headers=_as(dee))
    assert dup.status_code == 409

    client.post("/api/referral/REF1/signup")
    signup = client.post("/api/referral/REF1/signup").json()["referral"]
    assert signup["signups"] == 2

    client.post("/api/referral/REF1/earn", json={"amount": 100})
    earned = client.post("/api/referral/REF1/earn", json={"amount": 40}).json()["referral"]
    assert Decimal(str(earned["earnings"])) == Decimal("35")

    assert client.post("/api/referral/NOPE/signup").status_code == 404

    history = client.get("/api/referral/REF1/earnings", headers=_as(dee)).json()["earnings"]
    assert len(history) == 2
    assert client.get("/api/referral/REF1/earnings", headers=_as(ana)).status_code == 403


def test_messaging_flow(client):
    ana = _register(client, "ana", "creator")
    bo = _register(client, "bo")

    sent = client.post("/api/message/send", json={"recipientUsername": "ana", "content": "hi"}, headers=_as(bo))
    assert sent.status_code == 200
    missing = client.post("/api/message/send", json={"recipientUsername": "zed", "content": "hi"}, headers=_as(bo))
    assert missing.status_code == 404

    partners = client.get("/api/message/conversations", headers=_as(ana)).json()["conversations"]
    assert [p["username"] for p in partners] == ["bo"]
    thread = client.get("/api/message/thread/bo", headers=_as(ana)).json()["messages"]
    assert [m["content"] for m in thread] == ["hi"]


def test_tips(client):
    ana = _register(client, "ana", "creator")
    bo = _register(client, "bo")

    assert client.post("/api/tip/ana", json={"amount": 0}, headers=_as(bo)).status_code == 400
    assert client.post("/api/tip/ana", json={"amount": 5}, headers=_as(ana)).status_code == 400
    assert client.post("/api/tip/bo", json={"amount": 5}, headers=_as(ana)).status_code == 404
    assert client.post("/api/tip/ana", json={"amount": 5}, headers=_as(bo)).status_code == 200

    tips = client.get("/api/tips/ana").json()
    assert len(tips["tips"]) == 1
    assert Decimal(str(tips["total"])) == Decimal("5")


def test_search(client):
    ana = _register(client, "ana", "creator")
    client.post("/api/posts", json={"content": "sketch", "tags": ["art"]}, headers=_as(ana))

    assert len(client.get("/api/search/posts", params={"q": "ART"}).json()["results"]) == 1
    assert [u["username"] for u in client.get("/api/search/users", params={"q": "an"}).json()["results"]] == ["ana"]
    assert client.get("/api/search/posts").status_code == 400


def test_admin_routes(client):
    ana = _register(client, "ana", "creator")
    root = _register(client, "root", "admin")
    post = client.post("/api/posts", json={"content": "remove me"}, headers=_as(ana)).json()["post"]

    assert client.get("/api/admin/users", headers=_as(ana)).status_code == 403
    users = client.get("/api/admin/users", headers=_as(root)).json()["users"]
    assert {u["username"] for u in users} == {"ana", "root"}
    assert all("credential_secret" not in u for u in users)

    assert client.delete(f"/api/admin/posts/{post['id']}", headers=_as(root)).status_code == 200
    assert client.delete(f"/api/admin/posts/{post['id']}", headers=_as(root)).status_code == 404


def test_chatbot_and_live_token(client):
    bo = _register(client, "bo")
    reply = client.post("/api/chatbot/respond", json={"message": "hey"}, headers=_as(bo))
    assert reply.json()["reply"] == "echo: hey"
    assert client.get("/api/live/token", headers=_as(bo)).json()["token"]
    assert client.get("/api/live/token").status_code == 401


def test_string_amounts_rejected_as_invalid_input(client):
    ana = _register(client, "ana", "creator")
    dee = _register(client, "dee")
    client.post("/api/referral", json={"code": "REF1", "creatorId": ana["id"]}, headers=_as(dee))

    for amount in ("100", "abc"):
        resp = client.post("/api/referral/REF1/earn", json={"amount": amount})
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"
        tip = client.post("/api/tip/ana", json={"amount": amount}, headers=_as(dee))
        assert tip.status_code == 400
        assert tip.json()["error"] == "invalid_input"

    assert client.get("/api/referral/REF1/earnings", headers=_as(dee)).json()["earnings"] == []
    assert client.get("/api/tips/ana").json()["tips"] == []

    item = client.post("/api/store/ana", json={"name": "Print", "price": "10"}, headers=_as(ana))
    assert item.status_code == 400
    assert item.json()["error"] == "invalid_input"

    referral = client.post("/api/referral", json={"code": "REF2", "commission": "0.3"}, headers=_as(dee))
    assert referral.status_code == 400
    assert client.post("/api/referral/REF2/signup").status_code == 404


def test_malformed_body_reported_as_invalid_input(client):
    resp = client.post("/api/register", json={"username": "ana", "email": "ana@example.com"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "invalid_input"
    assert "password" in body["details"]["fields"]

    ana = _register(client, "ana", "creator")
    listed = client.put("/api/profile", json=["bio"], headers=_as(ana))
    assert listed.status_code == 400
    assert listed.json()["error"] == "invalid_input"


def test_importing_api_leaves_logging_unconfigured(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    importlib.reload(api)
    assert calls == []
