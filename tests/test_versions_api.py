"""Tests for the /api/items/{item_id}/versions endpoints."""

from tests.conftest import make_item


def _branched_item(client) -> int:
    """Item at version 2 (unreleased) with published version 1."""
    item_id = client.post("/api/items", json=make_item()).json()["id"]
    resp = client.post(f"/api/items/{item_id}/versions")
    assert resp.status_code == 201
    return item_id


class TestVersions:

    def test_create_version(self, client):
        item_id = client.post("/api/items", json=make_item()).json()["id"]
        resp = client.post(f"/api/items/{item_id}/versions")
        assert resp.status_code == 201
        data = resp.json()
        assert data["ok"] is True
        assert data["details"]["version_number"] == 2
        assert data["details"]["label"] == "2"

    def test_list_versions(self, client):
        item_id = _branched_item(client)
        resp = client.get(f"/api/items/{item_id}/versions")
        assert resp.status_code == 200
        data = resp.json()
        assert data["current"]["version_number"] == 1
        assert [v["version"]["version_number"] for v in data["versions"]] == [1]
        assert data["versions"][0]["item"]["parent_id"] == item_id

    def test_hide_and_unhide(self, client):
        item_id = _branched_item(client)

        resp = client.post(f"/api/items/{item_id}/versions/1/hide")
        assert resp.status_code == 200
        assert client.get(f"/api/items/{item_id}/versions").json()["versions"] == []
        hidden = client.get(f"/api/items/{item_id}/versions", params={"include_hidden": True}).json()
        assert hidden["versions"][0]["version"]["status"] == "Hidden"

        resp = client.post(f"/api/items/{item_id}/versions/1/unhide")
        assert resp.status_code == 200
        listed = client.get(f"/api/items/{item_id}/versions").json()["versions"]
        assert listed[0]["version"]["status"] == "Live"

    def test_delete_version(self, client):
        item_id = _branched_item(client)
        resp = client.delete(f"/api/items/{item_id}/versions/1")
        assert resp.status_code == 200
        versions = client.get(f"/api/items/{item_id}/versions", params={"include_hidden": True}).json()
        assert versions["versions"] == []

    def test_head_version_is_refused(self, client):
        item_id = _branched_item(client)
        resp = client.post(f"/api/items/{item_id}/versions/2/hide")
        assert resp.status_code == 409
        body = resp.json()
        assert body["error"] == "INVALID_STATE"
        assert "message" in body

    def test_non_decimal_selector_is_not_found(self, client):
        item_id = _branched_item(client)
        resp = client.post(f"/api/items/{item_id}/versions/\u00b2/hide")
        assert resp.status_code == 404
        assert resp.json()["error"] == "VERSION_NOT_FOUND"

    def test_unknown_version(self, client):
        item_id = _branched_item(client)
        resp = client.delete(f"/api/items/{item_id}/versions/beta")
        assert resp.status_code == 404
        assert resp.json()["error"] == "VERSION_NOT_FOUND"

    def test_versions_404_for_nonexistent_item(self, client):
        resp = client.get("/api/items/999/versions")
        assert resp.status_code == 404
        assert resp.json()["error"] == "ITEM_NOT_FOUND"

    def test_unversioned_item(self, client):
        item_id = client.post("/api/items", json=make_item(item_type="note")).json()["id"]
        resp = client.post(f"/api/items/{item_id}/versions")
        assert resp.status_code == 404
        assert resp.json()["error"] == "NOT_VERSIONED"


class TestOptionsApi:

    def test_get_options(self, client):
        resp = client.get("/api/options")
        assert resp.status_code == 200
        assert resp.json()["item_types"] == ["post", "page"]

    def test_update_options_drops_unsupported_types(self, client):
        resp = client.put("/api/options", json={"item_types": ["page", "revision", "attachment"]})
        assert resp.status_code == 200
        assert resp.json()["item_types"] == ["page"]
        assert client.get("/api/options").json()["item_types"] == ["page"]
