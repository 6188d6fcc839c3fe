"""
HTTP tests for the objection service (FastAPI TestClient).
"""

import importlib
import warnings
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from objections.config import Settings
from objections.errors import StorageUnavailable
from objections.lifecycle import ObjectionLifecycle
from objections.service.api import create_app

from .conftest import TEST_ADMIN_PASSWORD, TEST_ADMIN_USERNAME, farmer_headers

FARMER = {
    "first_name": "Almaz",
    "last_name": "Tesfaye",
    "phone": "+251900000001",
    "national_id": "ET-100",
    "password": "first-pass",
}


def register_and_login(client, **overrides):
    body = dict(FARMER, **overrides)
    response = client.post("/farmer/register", json=body)
    assert response.status_code == 201, response.text
    response = client.post("/farmer/login", json={
        "national_id": body["national_id"],
        "password": body["password"],
    })
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def admin_login(client):
    response = client.post("/objection/admin/login", json={
        "username": TEST_ADMIN_USERNAME,
        "password": TEST_ADMIN_PASSWORD,
    })
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestEndToEnd:

    def test_submit_review_resolve_archive(self, client):
        farmer = register_and_login(client)
        admin = admin_login(client)

        assert client.get("/objection/can-submit", headers=farmer).json() == {"canSubmit": True}

        response = client.post("/objection", json={"transaction_number": "TX1"}, headers=farmer)
        assert response.status_code == 201
        objection = response.json()
        assert objection["status"] == "pending"
        assert objection["code"].startswith("OBJ-")
        assert client.get("/objection/can-submit", headers=farmer).json() == {"canSubmit": False}

        active = client.get("/admin/objections", headers=admin).json()
        assert [row["code"] for row in active["rows"]] == [objection["code"]]
        assert active["totalPages"] == 1

        response = client.post(f"/admin/objection/{objection['id']}/review", headers=admin)
        assert response.status_code == 200
        assert response.json()["objection"]["status"] == "reviewed"

        response = client.post("/admin/resolve-objection", json={"objection_id": objection["id"]}, headers=admin)
        assert response.status_code == 200
        assert response.json()["objection"]["status"] == "resolved"

        assert client.get("/admin/objections", headers=admin).json()["rows"] == []
        archive = client.get("/admin/archive", params={"search": "Almaz"}, headers=admin).json()
        assert archive["searchTerm"] == "Almaz"
        assert len(archive["rows"]) == 1
        assert archive["rows"][0]["first_name"] == "Almaz"
        assert archive["rows"][0]["last_name"] == "Tesfaye"

        assert client.get("/objection/can-submit", headers=farmer).json() == {"canSubmit": True}
        mine = client.get("/objection", headers=farmer).json()
        assert [o["status"] for o in mine] == ["resolved"]

    def test_second_submission_conflicts(self, client):
        farmer = register_and_login(client)
        client.post("/objection", json={"transaction_number": "TX1"}, headers=farmer)

        response = client.post("/objection", json={"transaction_number": "TX2"}, headers=farmer)

        assert response.status_code == 409
        assert "detail" in response.json()
        assert len(client.get("/objection", headers=farmer).json()) == 1

    def test_resolve_twice(self, client):
        farmer = register_and_login(client)
        admin = admin_login(client)
        objection_id = client.post("/objection", json={"transaction_number": "TX1"}, headers=farmer).json()["id"]

        assert client.post(f"/admin/objection/{objection_id}/resolve", headers=admin).status_code == 200
        assert client.post(f"/admin/objection/{objection_id}/resolve", headers=admin).status_code == 409
        assert client.post(f"/admin/objection/{objection_id}/review", headers=admin).status_code == 409

    def test_unknown_objection(self, client, admin_headers):
        response = client.post("/admin/objection/9999/resolve", headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize("action", ["resolve", "review"])
    def test_objection_id_beyond_bigint(self, client, admin_headers, action):
        response = client.post(f"/admin/objection/99999999999999999999/{action}", headers=admin_headers)
        assert response.status_code == 404

    def test_resolve_body_id_beyond_bigint(self, client, admin_headers):
        response = client.post("/admin/resolve-objection", json={"objection_id": 2 ** 64}, headers=admin_headers)
        assert response.status_code == 404


class TestAuth:

    @pytest.mark.parametrize("method,path", [
        ("get", "/objection"),
        ("get", "/objection/can-submit"),
        ("get", "/admin/objections"),
        ("get", "/admin/archive"),
        ("post", "/admin/objection/1/review"),
    ])
    def test_missing_token(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/objection", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_farmer_token_on_admin_routes(self, client, tokens, make_farmer, make_objection):
        farmer_id = make_farmer()
        objection_id = make_objection(farmer_id)
        headers = farmer_headers(tokens, farmer_id)

        assert client.get("/admin/objections", headers=headers).status_code == 403
        assert client.get("/admin/archive", headers=headers).status_code == 403
        assert client.post(f"/admin/objection/{objection_id}/resolve", headers=headers).status_code == 403
        assert client.post("/admin/resolve-objection", json={"objection_id": objection_id},
                           headers=headers).status_code == 403

    def test_admin_token_on_farmer_routes(self, client, admin_headers):
        assert client.get("/objection", headers=admin_headers).status_code == 403
        assert client.post("/objection", json={"transaction_number": "TX1"},
                           headers=admin_headers).status_code == 403

    def test_wrong_admin_password(self, client):
        response = client.post("/objection/admin/login", json={
            "username": TEST_ADMIN_USERNAME,
            "password": "nope",
        })
        assert response.status_code == 401

    def test_wrong_farmer_password(self, client):
        register_and_login(client)
        response = client.post("/farmer/login", json={"national_id": "ET-100", "password": "nope"})
        assert response.status_code == 401

    def test_admin_login_disabled_without_credentials(self, storage):
        settings = Settings(database_url="sqlite://", jwt_secret="s" * 32)
        with TestClient(create_app(settings, storage)) as client:
            response = client.post("/objection/admin/login", json={"username": "", "password": ""})
        assert response.status_code == 401

    def test_missing_jwt_secret(self, storage):
        settings = Settings(database_url="sqlite://")
        with TestClient(create_app(settings, storage)) as client:
            response = client.get("/objection", headers={"Authorization": "Bearer x"})
        assert response.status_code == 500


class TestFarmerAccounts:

    def test_register_response(self, client):
        response = client.post("/farmer/register", json=FARMER)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Registered"
        assert body["farmer"]["first_name"] == "Almaz"
        assert "password_hash" not in body["farmer"]

    def test_duplicate_registration(self, client):
        client.post("/farmer/register", json=FARMER)
        assert client.post("/farmer/register", json=FARMER).status_code == 409

    def test_missing_field(self, client):
        body = dict(FARMER)
        del body["phone"]
        assert client.post("/farmer/register", json=body).status_code == 400

    def test_password_reset_flow(self, client, sent_codes):
        client.post("/farmer/register", json=FARMER)

        response = client.post("/farmer/forgot-password", json={
            "national_id": "ET-100",
            "phone": "+251900000001",
        })
        assert response.status_code == 200
        reset_token = response.json()["reset_token"]
        (_, code), = sent_codes

        response = client.post("/farmer/verify-code", json={"national_id": "ET-100", "verification_code": code})
        assert response.status_code == 200
        assert response.json()["reset_token"] == reset_token

        response = client.post("/farmer/reset-password", json={
            "national_id": "ET-100",
            "reset_token": reset_token,
            "password": "second-pass",
        })
        assert response.status_code == 200
        assert response.json() == {"message": "Password reset"}

        login = client.post("/farmer/login", json={"national_id": "ET-100", "password": "second-pass"})
        assert login.status_code == 200

    def test_forgot_password_unknown(self, client):
        response = client.post("/farmer/forgot-password", json={"national_id": "ET-404", "phone": "1"})
        assert response.status_code == 404

    def test_bad_verification_code(self, client):
        client.post("/farmer/register", json=FARMER)
        client.post("/farmer/forgot-password", json={"national_id": "ET-100", "phone": "+251900000001"})

        response = client.post("/farmer/verify-code", json={"national_id": "ET-100", "verification_code": "abc"})
        assert response.status_code == 400


class TestObjectionRoutes:

    def test_blank_transaction_number(self, client):
        farmer = register_and_login(client)
        response = client.post("/objection", json={"transaction_number": "   "}, headers=farmer)
        assert response.status_code == 400

    def test_missing_transaction_number(self, client):
        farmer = register_and_login(client)
        assert client.post("/objection", json={}, headers=farmer).status_code == 400

    def test_token_subject_beyond_bigint(self, client, tokens):
        token = tokens.issue(2 ** 64, "farmer")
        response = client.get("/objection", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_deleted_farmer(self, client, tokens):
        response = client.post("/objection", json={"transaction_number": "TX1"}, headers=farmer_headers(tokens, 4242))
        assert response.status_code == 404

    def test_storage_unavailable(self, client):
        farmer = register_and_login(client)
        with patch.object(ObjectionLifecycle, "can_submit", side_effect=StorageUnavailable("down")):
            response = client.get("/objection/can-submit", headers=farmer)

        assert response.status_code == 503
        assert response.headers["retry-after"] == "5"
        assert response.json() == {"detail": "down"}


class TestAdminListings:

    def test_pagination_and_search(self, client, admin_headers, make_farmer, make_objection):
        for i in range(12):
            make_objection(make_farmer(), code=f"OBJ-{1100 + i}")
        make_objection(make_farmer(), code="OBJ-9999")

        first = client.get("/admin/objections", headers=admin_headers).json()
        assert first["page"] == 1
        assert first["totalPages"] == 2
        assert len(first["rows"]) == 10

        second = client.get("/admin/objections", params={"page": "2"}, headers=admin_headers).json()
        assert len(second["rows"]) == 3

        beyond = client.get("/admin/objections", params={"page": "7"}, headers=admin_headers).json()
        assert beyond["rows"] == []
        assert beyond["page"] == 7
        assert beyond["totalPages"] == 2

        junk = client.get("/admin/objections", params={"page": "abc"}, headers=admin_headers).json()
        assert junk["page"] == 1

        response = client.get("/admin/objections", params={"page": "99999999999999999999"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["rows"] == []
        assert response.json()["totalPages"] == 2

        searched = client.get("/admin/objections", params={"search": "OBJ-99"}, headers=admin_headers).json()
        assert [row["code"] for row in searched["rows"]] == ["OBJ-9999"]
        assert searched["totalPages"] == 1


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.text == "OK"

    def test_health_pod(self, client):
        assert client.get("/health-pod").text == "OK"

    def test_health_when_database_down(self, client, storage):
        with patch.object(storage, "ping", return_value=False):
            response = client.get("/health")
            pod = client.get("/health-pod")

        assert response.status_code == 500
        assert response.text == "DB query failed"
        assert pod.status_code == 500
        assert pod.text == "DB connection failed"

    def test_livez(self, client):
        response = client.get("/livez")
        assert response.status_code == 200
        assert response.text == "Objection backend is up"

    def test_root_lists_endpoints(self, client):
        body = client.get("/").json()
        assert body["status"] == "operational"
        assert "POST /objection" in body["endpoints"]


class TestSchemas:

    def test_schemas_use_current_pydantic_config(self):
        from pydantic.warnings import PydanticDeprecatedSince20

        from objections.service import schemas

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            importlib.reload(schemas)

        assert not [w for w in caught if issubclass(w.category, PydanticDeprecatedSince20)]
        assert schemas.ObjectionResponse.model_config["from_attributes"] is True
