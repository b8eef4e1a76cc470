"""Integration tests for the HTTP surface."""

import logging

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from conftest import SpyStore
from ironrest.api.app import create_app
from ironrest.dispatch import RestRegistry
from ironrest.persistence import DatabaseConfig, StoreError, StoreFactory
from ironrest.types import AUTH_HEADER

TOKEN = "s3cret"
AUTH = {AUTH_HEADER: TOKEN}


@pytest.fixture
def registry(monkeypatch):
    monkeypatch.delenv("IRONREST_BINDINGS", raising=False)
    monkeypatch.delenv("IRONREST_HOOK_MODULES", raising=False)
    registry = RestRegistry()
    registry.configure(access_token=TOKEN)
    return registry


@pytest.fixture
def client(registry):
    with TestClient(create_app(registry)) as client:
        yield client


class TestScenarios:
    def test_insert_widget(self, client, registry, store):
        registry.attach("widgets", store, {"allowInsert": True})

        response = client.post("/api/widgets", json={"name": "a"}, headers=AUTH)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        (insert,) = store.called("insert")
        assert isinstance(insert[1]["_id"], ObjectId)
        body = response.json()
        assert body == {"_id": str(insert[1]["_id"]), "name": "a"}

    def test_delete_cancelled_by_hook(self, client, registry, store):
        registry.attach("widgets", store, {"beforeDelete": lambda doc_id: False})

        response = client.delete("/api/widgets/abc123", headers=AUTH)

        assert response.status_code == 401
        assert response.json() == "Unauthorized"
        assert store.called("remove") == []

    def test_list_denied(self, client, registry, store):
        registry.attach("widgets", store, {"allowView": False})

        response = client.get("/api/widgets", headers=AUTH)

        assert response.status_code == 401
        assert response.json() == "Unauthorized"
        assert store.called("find") == []

    def test_upsert_failure(self, client, registry, store):
        ran = []
        store.fail("upsert", StoreError("disk full", code="WriteError"))
        registry.attach("widgets", store, {"afterUpdate": ran.append})

        response = client.put("/api/widgets/abc123", json={"name": "b"}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "WriteError", "message": "disk full"}
        assert ran == []


class TestRouting:
    def test_unknown_collection(self, client):
        response = client.get("/api/ghosts", headers=AUTH)
        assert response.status_code == 404
        assert response.json() == "Not Found"

    def test_unknown_collection_without_token(self, client):
        assert client.delete("/api/ghosts/1").status_code == 404

    def test_missing_token(self, client, registry, store):
        registry.attach("widgets", store)
        response = client.get("/api/widgets")
        assert response.status_code == 401
        assert store.calls == []

    def test_wrong_token(self, client, registry, store):
        registry.attach("widgets", store)
        response = client.get("/api/widgets", headers={AUTH_HEADER: "nope"})
        assert response.status_code == 401

    def test_collection_patch_not_implemented(self, client, registry, store):
        registry.attach("widgets", store)
        response = client.patch("/api/widgets", json={}, headers=AUTH)
        assert response.status_code == 501
        assert response.json() == "Not Implemented"

    def test_malformed_json_is_400(self, client, registry, store):
        registry.attach("widgets", store)
        response = client.post(
            "/api/widgets",
            content=b"{not json",
            headers={**AUTH, "content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == "Bad Request"
        assert store.mutations == []

    @pytest.mark.parametrize("method", ["HEAD", "OPTIONS", "TRACE", "PATCH"])
    def test_other_document_methods_not_implemented(self, client, registry, store, method):
        registry.attach("widgets", store)
        response = client.request(method, "/api/widgets/abc", headers=AUTH)
        assert response.status_code == 501
        assert store.calls == []

    @pytest.mark.parametrize("method", ["HEAD", "OPTIONS", "TRACE"])
    @pytest.mark.parametrize("headers", [AUTH, {}])
    def test_unknown_collection_any_method(self, client, method, headers):
        assert client.request(method, "/api/ghosts", headers=headers).status_code == 404
        assert client.request(method, "/api/ghosts/abc", headers=headers).status_code == 404

    @pytest.mark.parametrize("method", ["HEAD", "OPTIONS"])
    def test_missing_token_any_method(self, client, registry, store, method):
        registry.attach("widgets", store)
        assert client.request(method, "/api/widgets/abc").status_code == 401

    def test_malformed_json_unknown_collection_is_404(self, client):
        response = client.post(
            "/api/ghosts",
            content=b"{bad",
            headers={**AUTH, "content-type": "application/json"},
        )
        assert response.status_code == 404
        assert response.json() == "Not Found"

    def test_malformed_json_without_token_is_401(self, client, registry, store):
        registry.attach("widgets", store)
        response = client.put(
            "/api/widgets/abc",
            content=b"{bad",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 401
        assert response.json() == "Unauthorized"
        assert store.calls == []

    def test_non_ascii_token(self, registry, store):
        registry.configure(access_token="clé")
        registry.attach("widgets", store)
        with TestClient(create_app(registry)) as client:
            response = client.get("/api/widgets", headers={AUTH_HEADER: "clé".encode("utf-8")})
        assert response.status_code == 200

    def test_attach_after_startup_is_served(self, client, registry):
        assert client.get("/api/late", headers=AUTH).status_code == 404
        registry.attach("late", SpyStore("late"))
        assert client.get("/api/late", headers=AUTH).status_code == 200

    def test_custom_prefix(self, registry, store):
        registry.configure(prefix="/rest/v2")
        registry.attach("widgets", store)
        with TestClient(create_app(registry)) as client:
            assert client.get("/rest/v2/widgets", headers=AUTH).status_code == 200
            assert client.get("/api/widgets", headers=AUTH).status_code == 404


class TestLifecycle:
    def test_full_document_lifecycle(self, client, registry, store):
        registry.attach("widgets", store)

        created = client.post("/api/widgets", json={"name": "a"}, headers=AUTH).json()
        doc_id = created["_id"]
        assert ObjectId.is_valid(doc_id)

        fetched = client.get(f"/api/widgets/{doc_id}", headers=AUTH)
        assert fetched.json() == {"_id": doc_id, "name": "a"}

        replaced = client.put(f"/api/widgets/{doc_id}", json={"name": "z"}, headers=AUTH)
        assert replaced.json() == {"_id": doc_id, "name": "z"}

        listed = client.get("/api/widgets", headers=AUTH).json()
        assert listed == [{"_id": doc_id, "name": "z"}]

        deleted = client.delete(f"/api/widgets/{doc_id}", headers=AUTH)
        assert deleted.status_code == 200
        assert deleted.content == b""

        assert client.get("/api/widgets", headers=AUTH).json() == []

    def test_after_hooks_run_after_response(self, client, registry, store):
        seen = []
        registry.attach("widgets", store, {"afterInsert": seen.append})
        response = client.post("/api/widgets", json={"name": "a"}, headers=AUTH)
        assert seen == [response.json()]

    def test_failing_after_hook_does_not_change_response(self, client, registry, store, caplog):
        def broken(doc):
            raise RuntimeError("after hook exploded")

        registry.attach("widgets", store, {"afterView": broken})
        with caplog.at_level(logging.ERROR):
            response = client.get("/api/widgets", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == []
        assert "after hook exploded" in caplog.text


class TestStartup:
    def test_bindings_attached_on_startup(self, registry, tmp_path):
        path = tmp_path / "bindings.yaml"
        path.write_text("collections:\n  widgets:\n    allowDelete: false\n")
        factory = StoreFactory(DatabaseConfig("memory://"))

        app = create_app(registry, store_factory=factory, bindings_path=path)
        with TestClient(app) as client:
            assert registry.names() == ["widgets"]
            created = client.post("/api/widgets", json={"n": 1}, headers=AUTH).json()
            assert client.get(f"/api/widgets/{created['_id']}", headers=AUTH).json() == created

        assert app.state.registry is registry

    def test_bindings_path_from_env(self, registry, tmp_path, monkeypatch):
        path = tmp_path / "bindings.yaml"
        path.write_text("collections:\n  gadgets: {}\n")
        monkeypatch.setenv("IRONREST_BINDINGS", str(path))
        monkeypatch.setenv("DATABASE_URL", "memory://")

        with TestClient(create_app(registry)):
            assert registry.names() == ["gadgets"]
