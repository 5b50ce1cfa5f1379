from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient, ASGITransport

from pos_checklist.database import get_db
from pos_checklist.main import app

from support import BrokenSession, configuration_payload, form_payload

FLAGS = [
    "saPassChange",
    "syncedUserPassChange",
    "nonSaPassChange",
    "windowsAuthDisable",
    "sqlCustomPort",
    "firewallOnAllPcs",
    "anydeskUninstall",
    "ultraviewerPassAndId",
    "posAdminPassChange",
]


# ── configuration ────────────────────────────────────────────────────────────

async def test_submit_configuration(client: AsyncClient, auth_headers):
    response = await client.post("/api/configuration/submit", json=configuration_payload(), headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Configuration submitted successfully"
    assert set(data["configuration"]) == {"id", "restaurantName", "outletName", "createdAt"}
    assert data["configuration"]["restaurantName"] == "Spice Garden"
    assert "saPassword" not in response.text


async def test_submit_configuration_requires_auth(client: AsyncClient):
    response = await client.post("/api/configuration/submit", json=configuration_payload())

    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized. Please login again."


async def test_submit_configuration_with_cookie_token(client: AsyncClient, test_user, codec):
    token = codec.issue(test_user.id, test_user.username)

    response = await client.post(
        "/api/configuration/submit",
        json=configuration_payload(),
        headers={"Cookie": f"token={token}"},
    )

    assert response.status_code == 201


async def test_submit_configuration_blank_field(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/configuration/submit",
        json=configuration_payload(restaurantName="   "),
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "restaurantName is required", "field": "restaurantName"}

    listing = await client.get("/api/configuration/list", headers=auth_headers)
    assert listing.json()["pagination"]["total"] == 0


async def test_submit_configuration_missing_non_sa_password(client: AsyncClient, auth_headers):
    body = configuration_payload()
    del body["nonSaPassword"]

    response = await client.post("/api/configuration/submit", json=body, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["field"] == "nonSaPassword"


async def test_wrongly_typed_field_is_a_400(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/configuration/submit",
        json=configuration_payload(restaurantName=123),
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["field"] == "restaurantName"


async def test_configuration_round_trip(client: AsyncClient, auth_headers, test_user):
    body = configuration_payload()
    created = await client.post(
        "/api/configuration/submit",
        json=body,
        headers={**auth_headers, "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )

    response = await client.get("/api/configuration/list", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}
    record = data["configurations"][0]
    assert record["id"] == created.json()["configuration"]["id"]
    assert record["userId"] == test_user.id
    assert record["username"] == "cashier01"
    for field, value in body.items():
        assert record[field] == value
    for flag in FLAGS:
        assert record[flag] is body.get(flag, False)
    assert record["ultraviewerUsername"] == ""
    assert record["ipAddress"] == "203.0.113.7"
    assert record["createdAt"] and record["updatedAt"]


# ── form ─────────────────────────────────────────────────────────────────────

async def test_submit_form(client: AsyncClient, auth_headers):
    response = await client.post("/api/form/submit", json=form_payload(), headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Form submitted successfully"
    assert set(data["form"]) == {"id", "restaurantName", "outletName", "createdAt"}


async def test_submit_form_requires_credentials(client: AsyncClient, auth_headers):
    response = await client.post("/api/form/submit", json=form_payload(nonSaCredentials=[]), headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "At least one Non-SA credential is required"


async def test_submit_form_credential_error_cites_index(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/form/submit",
        json=form_payload(nonSaCredentials=[{"username": "a", "password": ""}]),
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json() == {
        "detail": "Non-SA credential #1: Password is required",
        "field": "password",
        "index": 0,
    }


async def test_form_round_trip(client: AsyncClient, auth_headers, test_user):
    body = form_payload()
    await client.post("/api/form/submit", json=body, headers={**auth_headers, "X-Real-IP": "198.51.100.4"})

    response = await client.get("/api/form/list", headers=auth_headers)

    assert response.status_code == 200
    record = response.json()["forms"][0]
    for field, value in body.items():
        assert record[field] == value
    for flag in FLAGS:
        assert record[flag] is body.get(flag, False)
    assert record["userId"] == test_user.id
    assert record["ipAddress"] == "198.51.100.4"


async def test_form_and_configuration_listings_are_separate(client: AsyncClient, auth_headers):
    await client.post("/api/form/submit", json=form_payload(), headers=auth_headers)

    configurations = await client.get("/api/configuration/list", headers=auth_headers)
    forms = await client.get("/api/form/list", headers=auth_headers)

    assert configurations.json()["configurations"] == []
    assert len(forms.json()["forms"]) == 1


# ── listing ──────────────────────────────────────────────────────────────────

async def test_users_never_see_each_others_submissions(client: AsyncClient, auth_headers, other_auth_headers, other_user):
    await client.post("/api/form/submit", json=form_payload(), headers=auth_headers)
    await client.post("/api/form/submit", json=form_payload(), headers=other_auth_headers)
    await client.post("/api/form/submit", json=form_payload(outletName="Airport"), headers=other_auth_headers)

    response = await client.get("/api/form/list", headers=other_auth_headers)

    forms = response.json()["forms"]
    assert len(forms) == 2
    assert {f["userId"] for f in forms} == {other_user.id}


async def test_list_pagination_query(client: AsyncClient, auth_headers):
    for i in range(3):
        await client.post(
            "/api/configuration/submit",
            json=configuration_payload(outletName=f"Outlet {i}"),
            headers=auth_headers,
        )

    response = await client.get("/api/configuration/list?page=2&limit=2", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert len(data["configurations"]) == 1
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


async def test_list_requires_auth(client: AsyncClient):
    response = await client.get("/api/form/list")

    assert response.status_code == 401


@pytest.mark.parametrize("query", ["page=0", "limit=0", "limit=101", "page=abc"])
async def test_list_rejects_bad_paging(client: AsyncClient, auth_headers, query):
    response = await client.get(f"/api/form/list?{query}", headers=auth_headers)

    assert response.status_code == 400


async def test_submit_database_failure_is_generic_500(client: AsyncClient, auth_headers):
    async def override_get_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = override_get_db

    response = await client.post("/api/form/submit", json=form_payload(), headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error. Please try again."}


async def test_list_database_failure_is_generic_500(client: AsyncClient, auth_headers):
    async def override_get_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = override_get_db

    response = await client.get("/api/configuration/list", headers=auth_headers)

    assert response.status_code == 500
    assert "database" not in response.text


async def test_page_beyond_any_offset_is_a_400(client: AsyncClient, auth_headers):
    response = await client.get("/api/form/list?page=99999999999999999999", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"detail": "page is out of range"}


async def test_unexpected_error_is_generic_json_500(client: AsyncClient, auth_headers):
    class FailingSession(BrokenSession):
        async def scalar(self, *args, **kwargs):
            raise RuntimeError("boom")

    async def override_get_db():
        yield FailingSession()

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/api/form/list", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "boom" not in response.text


async def test_timestamps_carry_utc_offset(client: AsyncClient, auth_headers):
    created = await client.post("/api/form/submit", json=form_payload(), headers=auth_headers)
    listed = await client.get("/api/form/list", headers=auth_headers)

    record = listed.json()["forms"][0]
    for value in (created.json()["form"]["createdAt"], record["createdAt"], record["updatedAt"]):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        assert parsed.utcoffset() == timedelta(0)
