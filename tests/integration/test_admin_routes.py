"""
Integration tests for the data-source administration routes.
"""
import pytest
from dotenv import dotenv_values


@pytest.fixture
def data_context(app):
    return app.extensions["mockshop_data"]


@pytest.mark.integration
class TestDatabaseToggle:
    """Tests for /api/admin/database/toggle."""

    def test_status_in_document_store_mode(self, client, db_dir):
        client.get("/api/products")

        data = client.get("/api/admin/database/toggle").get_json()["data"]

        assert data["data_source"] == "Document store"
        assert data["mode"] == "read-write"
        assert data["db_path"] == str(db_dir)
        assert "products" in [f["collection"] for f in data["db_stats"]["file_details"]]

    def test_status_in_snapshot_mode(self, snapshot_client):
        data = snapshot_client.get("/api/admin/database/toggle").get_json()["data"]

        assert data["mode"] == "read-only"
        assert data["db_path"] is None
        assert data["db_stats"] is None

    def test_toggle_flips_and_persists(self, client, app_config, data_context):
        data = client.post("/api/admin/database/toggle").get_json()["data"]

        assert data["previous_state"] is True
        assert data["current_state"] is False
        assert data_context.mode == "snapshot"
        assert dotenv_values(app_config.ENV_FILE)["USE_DOCUMENT_STORE"] == "false"

        back = client.post("/api/admin/database/toggle").get_json()["data"]
        assert back["current_state"] is True
        assert dotenv_values(app_config.ENV_FILE)["USE_DOCUMENT_STORE"] == "true"

    def test_writes_survive_a_round_trip(self, client):
        created = client.post("/api/customers", json={"email": "keep@example.com", "name": "Keep"}).get_json()["data"]

        client.post("/api/admin/database/toggle")
        blocked = client.put("/api/customers/cust_001", json={"name": "Nope"})
        assert blocked.get_json()["error"]["code"] == "WRITE_NOT_ENABLED"
        assert client.get(f"/api/customers/{created['id']}").status_code == 404

        client.post("/api/admin/database/toggle")
        assert client.get(f"/api/customers/{created['id']}").status_code == 200

    def test_toggle_with_reseed(self, client):
        client.delete("/api/products/prod_001")
        client.post("/api/admin/database/toggle")

        data = client.post("/api/admin/database/toggle?reseed=true").get_json()["data"]

        assert "products" in data["reseeded"]
        assert client.get("/api/products/prod_001").status_code == 200

    def test_failed_reseed_leaves_mode_unchanged(self, client, data_context, mocker):
        data_context.set_mode(False)
        mocker.patch("mockshop.routes.admin_api.rebuild_document_store", side_effect=OSError("disk full"))

        response = client.post("/api/admin/database/toggle?reseed=true")

        assert response.status_code == 500
        assert data_context.mode == "snapshot"


@pytest.mark.integration
class TestNormalizeAndReset:
    """Tests for /api/admin/database/normalize and /reset."""

    def test_normalize(self, client):
        first = client.post("/api/admin/database/normalize").get_json()["data"]
        second = client.post("/api/admin/database/normalize").get_json()["data"]

        assert first["normalized"]["products"] == 8
        assert set(second["normalized"].values()) == {0}
        assert client.get("/api/products").get_json()["meta"]["total"] == 8

    def test_normalize_rejected_in_snapshot_mode(self, snapshot_client):
        response = snapshot_client.post("/api/admin/database/normalize")

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "WRITE_NOT_ENABLED"

    def test_reset_document_store(self, client):
        client.post("/api/customers", json={"email": "tmp@example.com", "name": "Tmp"})

        data = client.post("/api/admin/database/reset").get_json()["data"]

        assert data["mode"] == "document_store"
        assert client.get("/api/customers").get_json()["meta"]["total"] == 3

    def test_reset_snapshot(self, snapshot_client):
        data = snapshot_client.post("/api/admin/database/reset").get_json()["data"]

        assert data == {"success": True, "mode": "snapshot", "reseeded": []}
