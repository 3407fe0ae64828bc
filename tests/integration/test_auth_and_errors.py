"""
Integration tests for the auth guard and JSON error handling.
"""
import base64

import pytest

from mockshop.errors import BackendIOError


@pytest.mark.integration
class TestBasicAuth:
    """Requests under /api need basic-auth credentials."""

    def test_missing_header(self, anon_client):
        response = anon_client.get("/api/products")

        assert response.status_code == 401
        error = response.get_json()["error"]
        assert error["code"] == "UNAUTHORIZED"
        assert error["message"] == "Missing or invalid Authorization header"

    def test_malformed_header(self, anon_client):
        response = anon_client.get("/api/products", headers={"Authorization": "Basic !!notbase64!!"})

        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Invalid Authorization format"

    def test_wrong_credentials(self, anon_client):
        token = base64.b64encode(b"tester:nope").decode()

        response = anon_client.get("/api/products", headers={"Authorization": f"Basic {token}"})

        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Invalid credentials"

    def test_valid_credentials(self, client):
        assert client.get("/api/products").status_code == 200

    def test_docs_are_public(self, anon_client):
        assert anon_client.get("/api/docs").status_code == 200
        assert anon_client.get("/api-spec.json").status_code == 200

    def test_preflight_skips_auth(self, anon_client):
        response = anon_client.options("/api/products", headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        })

        assert response.status_code == 200
        assert response.headers.get("Access-Control-Allow-Origin")

    def test_auth_can_be_disabled(self, app, anon_client):
        app.config["AUTH_ENABLED"] = False

        assert anon_client.get("/api/products").status_code == 200


@pytest.mark.integration
class TestAdminKey:
    """Admin routes need X-Admin-Key in production."""

    def test_not_required_outside_production(self, client):
        assert client.get("/api/admin/database/toggle").status_code == 200

    def test_required_in_production(self, app, client):
        app.config["APP_ENV"] = "production"

        missing = client.get("/api/admin/database/toggle")
        wrong = client.get("/api/admin/database/toggle", headers={"X-Admin-Key": "bad"})
        right = client.get("/api/admin/database/toggle", headers={"X-Admin-Key": "admin-key"})

        assert missing.status_code == 401
        assert wrong.status_code == 401
        assert right.status_code == 200

    def test_production_without_configured_key_rejects(self, app, client):
        app.config.update(APP_ENV="production", ADMIN_KEY="")

        response = client.get("/api/admin/database/toggle", headers={"X-Admin-Key": ""})

        assert response.status_code == 401


@pytest.mark.integration
class TestErrorEnvelopes:
    """Errors always come back as {"error": {...}}."""

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "NOT_FOUND"

    def test_wrong_method(self, client):
        response = client.patch("/api/products")

        assert response.status_code == 405
        assert response.get_json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_write_in_snapshot_mode(self, snapshot_client):
        response = snapshot_client.delete("/api/products/prod_001")

        assert response.status_code == 400
        error = response.get_json()["error"]
        assert error["code"] == "WRITE_NOT_ENABLED"
        assert error["details"] == {"collection": "products", "operation": "delete"}

    def test_backend_failure_is_500(self, client, mocker):
        mocker.patch("mockshop.routes.products_api.product_service.get_by_id",
                     side_effect=BackendIOError("products", "load", OSError("disk gone")))

        response = client.get("/api/products/prod_001")

        assert response.status_code == 500
        assert response.get_json()["error"]["code"] == "INTERNAL_SERVER_ERROR"

    def test_unexpected_exception_is_500(self, client, mocker):
        mocker.patch("mockshop.routes.faq_api.faq_service.find_all", side_effect=RuntimeError("boom"))

        response = client.get("/api/faq/lookup?query=shipping")

        assert response.status_code == 500
        assert response.get_json()["error"] == {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred",
        }

    def test_invalid_json_body(self, client):
        response = client.post("/api/products", data="not json", content_type="application/json")

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "BAD_REQUEST"
