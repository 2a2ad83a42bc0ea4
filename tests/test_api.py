"""End-to-end tests through the HTTP API."""

import pytest
from unittest.mock import MagicMock
from uuid import UUID, uuid4

from fastapi.testclient import TestClient

from lxc_scheduler.api.main import create_app
from lxc_scheduler.core.errors import StorageError


def register(client, name, ip):
    response = client.post("/api/v1/lxd", json={"name": name, "ip": ip})
    assert response.status_code == 200
    return response.json()


def delete(client, container_id):
    return client.request("DELETE", "/api/v1/lxc", json={"id": container_id})


@pytest.fixture
def h1(client, metrics):
    metrics.set_load("10.0.0.1", 0.2)
    return register(client, "h1", "10.0.0.1")


@pytest.fixture
def created(client, h1):
    response = client.post("/api/v1/lxc", json={"name": "c1", "alias": "ubuntu"})
    assert response.status_code == 200
    return response.json()


class TestCreate:

    def test_empty_fleet_fails_placement(self, client, metrics):
        metrics.set_load("10.0.0.1", 0.2)

        response = client.post("/api/v1/lxc", json={"name": "c1", "alias": "ubuntu"})

        assert response.status_code == 400
        assert "10.0.0.1" in response.json()["error"]
        assert client.get("/api/v1/lxc").json() == []

    def test_create_returns_committed_record(self, client, h1):
        response = client.post("/api/v1/lxc", json={"name": "c1", "alias": "ubuntu"})

        assert response.status_code == 200
        body = response.json()
        UUID(body["id"])
        assert body["name"] == "c1"
        assert body["alias"] == "ubuntu"
        assert body["host_id"] == h1["id"]
        assert body["status"] == "creating"

    def test_extra_fields_ignored(self, client, h1):
        response = client.post(
            "/api/v1/lxc",
            json={"name": "c1", "alias": "ubuntu", "description": "scratch box"},
        )

        assert response.status_code == 200

    def test_created_record_is_listed(self, client, created):
        listed = client.get("/api/v1/lxc").json()

        assert listed == [{
            "id": created["id"],
            "container_name": "c1",
            "host_name": "h1",
            "image": "ubuntu",
            "status": "creating",
        }]

    def test_metrics_unavailable_is_503(self, client):
        register(client, "h1", "10.0.0.1")

        response = client.post("/api/v1/lxc", json={"name": "c1", "alias": "ubuntu"})

        assert response.status_code == 503
        assert "error" in response.json()

    def test_malformed_json_is_400(self, client, h1):
        response = client.post(
            "/api/v1/lxc",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "malformed JSON body"}

    def test_missing_field_is_400(self, client, h1):
        response = client.post("/api/v1/lxc", json={"name": "c1"})

        assert response.status_code == 400
        assert "alias" in response.json()["error"]


class TestStatusUpdate:

    def test_update_to_running(self, client, created):
        response = client.put("/api/v1/lxc", json={"id": created["id"], "status": "running"})

        assert response.status_code == 200
        assert response.json() == {"message": "success updating lxc state"}
        [row] = client.get("/api/v1/lxc").json()
        assert row["status"] == "running"

    def test_back_to_creating_is_409(self, client, created):
        client.put("/api/v1/lxc", json={"id": created["id"], "status": "running"})

        response = client.put("/api/v1/lxc", json={"id": created["id"], "status": "creating"})

        assert response.status_code == 409
        [row] = client.get("/api/v1/lxc").json()
        assert row["status"] == "running"

    def test_same_update_twice(self, client, created):
        for _ in range(2):
            response = client.put("/api/v1/lxc", json={"id": created["id"], "status": "running"})
            assert response.status_code == 200

    def test_unknown_status_is_400(self, client, created):
        response = client.put("/api/v1/lxc", json={"id": created["id"], "status": "paused"})

        assert response.status_code == 400

    def test_unknown_id_is_404(self, client, h1):
        response = client.put("/api/v1/lxc", json={"id": str(uuid4()), "status": "running"})

        assert response.status_code == 404

    def test_bad_uuid_is_400(self, client, h1):
        response = client.put("/api/v1/lxc", json={"id": "nope", "status": "running"})

        assert response.status_code == 400


class TestHosts:

    def test_two_creates_on_tied_hosts(self, client, metrics):
        h1 = register(client, "h1", "10.0.0.1")
        register(client, "h2", "10.0.0.2")
        metrics.set_load("10.0.0.2", 1.0)
        metrics.set_load("10.0.0.1", 1.0)

        first = client.post("/api/v1/lxc", json={"name": "a", "alias": "ubuntu"}).json()
        second = client.post("/api/v1/lxc", json={"name": "b", "alias": "ubuntu"}).json()

        assert first["host_id"] == second["host_id"] == h1["id"]
        assert first["id"] != second["id"]

        on_h1 = client.get("/api/v1/lxd/h1/lxc").json()
        assert {c["id"] for c in on_h1} == {first["id"], second["id"]}
        assert client.get("/api/v1/lxd/h2/lxc").json() == []

    def test_unknown_host_is_404(self, client):
        response = client.get("/api/v1/lxd/ghost/lxc")

        assert response.status_code == 404
        assert response.json() == {"error": "host ghost not found"}

    def test_duplicate_host_is_409(self, client, h1):
        response = client.post("/api/v1/lxd", json={"name": "h1", "ip": "10.0.0.5"})

        assert response.status_code == 409

    def test_list_hosts(self, client, h1):
        assert client.get("/api/v1/lxd").json() == [h1]


class TestDelete:

    def test_delete_cascades_and_is_idempotent(self, client, created):
        for container_port, host_port in [(80, 8080), (22, 2222)]:
            response = client.post("/api/v1/lxc_services", json={
                "service": "svc",
                "container_id": created["id"],
                "container_port": container_port,
                "host_port": host_port,
            })
            assert response.status_code == 200

        response = delete(client, created["id"])

        assert response.status_code == 200
        assert response.json() == {"message": "delete lxc success"}
        assert client.get("/api/v1/lxc_services").json() == []
        assert client.get("/api/v1/lxc").json() == []

        again = delete(client, created["id"])
        assert again.status_code == 404

    def test_delete_without_body_is_400(self, client):
        response = client.request("DELETE", "/api/v1/lxc")

        assert response.status_code == 400


class TestServices:

    def test_service_record(self, client, h1, created):
        response = client.post("/api/v1/lxc_services", json={
            "service": "http",
            "container_id": created["id"],
            "container_port": 80,
            "host_port": 8080,
        })

        body = response.json()
        assert body["host_id"] == h1["id"]
        assert body["container_name"] == "c1"
        assert body["status"] == "creating"

    def test_duplicate_pair_is_409(self, client, created):
        payload = {
            "service": "http",
            "container_id": created["id"],
            "container_port": 80,
            "host_port": 8080,
        }
        client.post("/api/v1/lxc_services", json=payload)

        response = client.post("/api/v1/lxc_services", json=payload)

        assert response.status_code == 409
        assert len(client.get("/api/v1/lxc_services").json()) == 1

    def test_port_out_of_range_is_400(self, client, created):
        response = client.post("/api/v1/lxc_services", json={
            "service": "http",
            "container_id": created["id"],
            "container_port": 0,
            "host_port": 8080,
        })

        assert response.status_code == 400


class TestResponseHeaders:

    def test_success_headers(self, client):
        response = client.get("/api/v1/lxc")

        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["content-type"].startswith("application/json")

    def test_error_headers(self, client):
        response = client.get("/api/v1/lxd/ghost/lxc")

        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["content-type"].startswith("application/json")

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_wrong_method_keeps_allow_header(self, client):
        response = client.patch("/api/v1/lxc", json={})

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}
        assert "PUT" in response.headers["allow"]
        assert response.headers["access-control-allow-origin"] == "*"


class TestErrorMapping:
    """Errors raised below the API map to status codes in one place."""

    def test_storage_error_is_500(self):
        scheduler = MagicMock()
        scheduler.list_containers.side_effect = StorageError("connection lost")

        with TestClient(create_app(scheduler)) as client:
            response = client.get("/api/v1/lxc")

        assert response.status_code == 500
        assert response.json() == {"error": "connection lost"}

    def test_unhandled_error_is_500(self):
        scheduler = MagicMock()
        scheduler.list_hosts.side_effect = RuntimeError("boom")

        with TestClient(create_app(scheduler), raise_server_exceptions=False) as client:
            response = client.get("/api/v1/lxd")

        assert response.status_code == 500
        assert response.json() == {"error": "boom"}
        assert response.headers["access-control-allow-origin"] == "*"
