import pytest
from httpx import AsyncClient

from app.core.config import settings


async def _confession(app_client: AsyncClient, text: str, actor: str) -> str:
    r = await app_client.post("/confessions", json={"text": text}, headers={"X-Actor-Id": actor})
    assert r.status_code == 201
    return r.json()["id"]


@pytest.mark.asyncio
async def test_admin_requires_token(app_client: AsyncClient):
    r = await app_client.get("/admin/reports")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"

    r2 = await app_client.get("/admin/reports", headers={"X-Admin-Token": "wrong"})
    assert r2.status_code == 401


@pytest.mark.asyncio
async def test_admin_disabled_without_configured_token(app_client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "admin_token", None)
    r = await app_client.get("/admin/reports", headers={"X-Admin-Token": "anything"})
    assert r.status_code == 503
    assert r.json()["error"]["code"] == "ADMIN_DISABLED"


@pytest.mark.asyncio
async def test_hide_removes_confession_from_feeds(app_client: AsyncClient, admin_headers):
    cid = await _confession(app_client, "hide me", "device-1")
    keep = await _confession(app_client, "keep me", "device-2")

    r = await app_client.post(f"/admin/confessions/{cid}:hide", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"id": cid, "hidden": True}

    ids = [row["id"] for row in (await app_client.get("/feed")).json()["rows"]]
    assert ids == [keep]

    # Hidden confessions can no longer be reported
    rep = await app_client.post(f"/confessions/{cid}/report", json={"reason": "spam"})
    assert rep.status_code == 404


@pytest.mark.asyncio
async def test_hide_unknown_is_404(app_client: AsyncClient, admin_headers):
    r = await app_client.post("/admin/confessions/nope:hide", headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_admin_list_and_resolve(app_client: AsyncClient, admin_headers):
    cid = await _confession(app_client, "reported twice", "device-3")
    for reason in ("spam", "threats", "other"):
        r = await app_client.post(f"/confessions/{cid}/report", json={"reason": reason})
        assert r.status_code == 201

    r = await app_client.get(
        "/admin/reports", params={"status": "open", "limit": 2}, headers=admin_headers
    )
    assert r.status_code == 200
    j = r.json()
    assert len(j["items"]) == 2
    assert j["items"][0]["confession_id"] == cid
    assert j["next_cursor"]

    r_next = await app_client.get(
        "/admin/reports",
        params={"status": "open", "limit": 2, "cursor": j["next_cursor"]},
        headers=admin_headers,
    )
    rest = r_next.json()
    assert len(rest["items"]) == 1
    assert rest["next_cursor"] is None
    all_ids = [it["id"] for it in j["items"] + rest["items"]]
    assert len(set(all_ids)) == 3

    first_id = all_ids[0]
    r_res = await app_client.patch(f"/admin/reports/{first_id}:resolve", headers=admin_headers)
    assert r_res.status_code == 200
    assert r_res.json() == {"id": first_id, "status": "resolved"}

    open_ids = [
        it["id"]
        for it in (
            await app_client.get(
                "/admin/reports", params={"status": "open", "limit": 100}, headers=admin_headers
            )
        ).json()["items"]
    ]
    assert first_id not in open_ids

    resolved = (
        await app_client.get(
            "/admin/reports", params={"status": "resolved"}, headers=admin_headers
        )
    ).json()["items"]
    assert [it["id"] for it in resolved] == [first_id]


@pytest.mark.asyncio
async def test_resolve_unknown_report_is_404(app_client: AsyncClient, admin_headers):
    r = await app_client.patch("/admin/reports/9999:resolve", headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_admin_list_rejects_garbage_cursor(app_client: AsyncClient, admin_headers):
    r = await app_client.get(
        "/admin/reports", params={"cursor": "not-a-cursor"}, headers=admin_headers
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_CURSOR"
