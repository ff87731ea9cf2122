"""Tests for the HTTP surface, with storage replaced by in-memory adapters."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
import pytz
from fastapi.testclient import TestClient

from api.dependencies import get_association_lookup, get_date_resolver, get_preset_manager, get_store
from api.main import app
from filter_engine.dates import DateResolver
from filter_engine.exceptions import DatabaseError
from filter_engine.store.base import StoreAdapter
from filter_engine.store.memory import InMemoryAssociationLookup, InMemoryStore
from filter_presets.exceptions import PresetNameExistsError, PresetNotFoundError
from filter_presets.manager import FilterPresetManager
from filter_presets.models import FilterPreset

FIXED_NOW = datetime(2025, 3, 12, 15, 30, tzinfo=pytz.UTC)


def service(service_id, name, port, tag_names, created):
    return {
        "id": service_id,
        "name": name,
        "port": port,
        "tags": [{"tag": {"name": tag_name}} for tag_name in tag_names],
        "createdAt": datetime(*created, tzinfo=pytz.UTC),
        "deleted": False,
    }


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        {
            "services": [
                service(1, "auth-api", 8080, ["prod"], (2025, 1, 1)),
                service(2, "billing", 9000, [], (2025, 2, 1)),
                service(3, "search-api", 8081, ["prod", "staging"], (2025, 3, 1)),
            ],
            "release_notes": [{"id": 1, "note": "Fixed login", "status": "deployed", "createdAt": datetime(2025, 3, 1)}],
        }
    )


@pytest.fixture
def preset_manager() -> AsyncMock:
    return AsyncMock(spec=FilterPresetManager)


@pytest.fixture
def client(store, preset_manager):
    lookup = InMemoryAssociationLookup(
        groups=[{"id": 1, "name": "Payments"}],
        group_items=[{"groupId": 1, "itemType": "service", "itemId": "2"}],
    )
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_association_lookup] = lambda: lookup
    app.dependency_overrides[get_date_resolver] = lambda: DateResolver(clock=lambda: FIXED_NOW)
    app.dependency_overrides[get_preset_manager] = lambda: preset_manager
    yield TestClient(app)
    app.dependency_overrides.clear()


def ids(response):
    return [item["id"] for item in response.json()["data"]]


class TestListing:
    def test_list_resources(self, client):
        response = client.get("/resources/")

        assert response.status_code == 200
        assert "services" in response.json()["resources"]

    def test_list_without_body(self, client):
        response = client.post("/resources/services/list")

        assert response.status_code == 200
        assert ids(response) == [3, 2, 1]
        assert response.json()["pagination"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}

    def test_filter_tree(self, client):
        body = {
            "filters": {
                "condition": "and",
                "childs": [{"key": "tags.name", "type": "STRING", "operator": "eq", "value": "prod"}],
            },
            "orderBy": [{"key": "name", "direction": "asc"}],
        }
        response = client.post("/resources/services/list", json=body)

        assert response.status_code == 200
        assert ids(response) == [1, 3]

    def test_membership_filter(self, client):
        body = {"filters": [{"key": "groups.name", "type": "STRING", "operator": "eq", "value": "Payments"}]}

        assert ids(client.post("/resources/services/list", json=body)) == [2]

    def test_limit_is_clamped(self, client):
        response = client.post("/resources/services/list", json={"limit": 5000, "page": -1})

        assert response.json()["pagination"]["limit"] == 1000
        assert response.json()["pagination"]["page"] == 1

    def test_query_string_fallback(self, client):
        response = client.post("/resources/services/list?page=2&limit=2", json={"search": "  "})

        assert ids(response) == [1]
        assert response.json()["pagination"]["totalPages"] == 2

    def test_get_with_query_string(self, client):
        response = client.get("/resources/services", params={"search": "billing"})

        assert response.status_code == 200
        assert ids(response) == [2]

    def test_resource_name_aliases(self, client):
        response = client.post("/resources/release-notes/list", json={"search": "login"})

        assert ids(response) == [1]

    def test_unknown_resource(self, client):
        assert client.post("/resources/invoices/list").status_code == 404
        assert client.get("/resources/invoices/metadata").status_code == 404

    def test_store_failure(self, client):
        failing_store = AsyncMock(spec=StoreAdapter)
        failing_store.find.side_effect = DatabaseError("connection refused")
        app.dependency_overrides[get_store] = lambda: failing_store

        response = client.post("/resources/services/list")

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"


def test_metadata(client):
    response = client.get("/resources/tasks/metadata")

    assert response.status_code == 200
    payload = response.json()
    assert payload["defaultSort"] == {"key": "createdAt", "direction": "desc"}
    assert "STRING" in payload["supportedOperators"]
    assert any(field["key"] == "assignedToUser.name" for field in payload["fields"])


class TestFilterPresets:
    HEADERS = {"X-User-Id": "user-1"}

    @pytest.fixture
    def preset(self) -> FilterPreset:
        return FilterPreset(
            user_id="user-1",
            page_id="tasks",
            name="Blocked",
            filters=[{"key": "status", "type": "STRING", "operator": "eq", "value": "blocked"}],
        )

    def test_user_required(self, client):
        assert client.get("/filter-presets/").status_code == 401

    def test_create(self, client, preset_manager, preset):
        preset_manager.create_preset.return_value = preset

        response = client.post(
            "/filter-presets/",
            headers=self.HEADERS,
            json={"pageId": "tasks", "name": "Blocked", "filters": preset.filters, "isShared": False},
        )

        assert response.status_code == 201
        assert response.json()["id"] == preset.id
        assert response.json()["filters"]["condition"] == "and"
        kwargs = preset_manager.create_preset.call_args.kwargs
        assert kwargs["user_id"] == "user-1"
        assert kwargs["page_id"] == "tasks"

    def test_create_duplicate(self, client, preset_manager):
        preset_manager.create_preset.side_effect = PresetNameExistsError("Preset 'Blocked' already exists on page 'tasks'")

        response = client.post("/filter-presets/", headers=self.HEADERS, json={"pageId": "tasks", "name": "Blocked"})

        assert response.status_code == 409

    def test_create_requires_page(self, client):
        response = client.post("/filter-presets/", headers=self.HEADERS, json={"name": "Blocked"})

        assert response.status_code == 422

    def test_list(self, client, preset_manager, preset):
        preset_manager.list_presets.return_value = [preset]

        response = client.get("/filter-presets/", headers=self.HEADERS, params={"pageId": "tasks"})

        assert response.status_code == 200
        assert [item["name"] for item in response.json()["presets"]] == ["Blocked"]
        preset_manager.list_presets.assert_awaited_once_with("user-1", page_id="tasks")

    def test_get_missing(self, client, preset_manager):
        preset_manager.get_preset.side_effect = PresetNotFoundError("Filter preset x not found")

        assert client.get("/filter-presets/x", headers=self.HEADERS).status_code == 404

    def test_update_sends_only_provided_fields(self, client, preset_manager, preset):
        preset_manager.update_preset.return_value = preset

        response = client.patch(f"/filter-presets/{preset.id}", headers=self.HEADERS, json={"isShared": True})

        assert response.status_code == 200
        preset_manager.update_preset.assert_awaited_once_with("user-1", preset.id, is_shared=True)

    def test_delete(self, client, preset_manager):
        response = client.delete("/filter-presets/abc", headers=self.HEADERS)

        assert response.status_code == 204
        preset_manager.delete_preset.assert_awaited_once_with("user-1", "abc")

    def test_delete_missing(self, client, preset_manager):
        preset_manager.delete_preset.side_effect = PresetNotFoundError("Filter preset abc not found")

        assert client.delete("/filter-presets/abc", headers=self.HEADERS).status_code == 404
