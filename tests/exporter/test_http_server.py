import pytest
import requests

from torch_exporter.exporter import http_server


@pytest.fixture
def server(registry):
    srv = http_server.run_http_server(registry, addr="127.0.0.1", port=0)
    yield srv
    srv.shutdown()
    srv.server_close()


def _url(srv, path):
    host, port = srv.server_address[:2]
    return f"http://{host}:{port}{path}"


def test_metrics_endpoint_serves_registry(server, registry):
    """/metrics devolve o estado atual do registry em formato Prometheus."""
    registry.grid_count.set(42)
    registry.replace_players([("Alice", "7", 120.0)])
    resp = requests.get(_url(server, "/metrics"), timeout=5)
    assert resp.status_code == 200
    assert resp.headers["Content-Type"].startswith("text/plain")
    assert "spaceengineers_grid_count 42.0" in resp.text
    assert 'spaceengineers_players{name="Alice",steamID="7"} 120.0' in resp.text


def test_metrics_reflects_updates_between_scrapes(server, registry):
    registry.grid_count.set(1)
    first = requests.get(_url(server, "/metrics"), timeout=5).text
    registry.grid_count.set(2)
    second = requests.get(_url(server, "/metrics"), timeout=5).text
    assert "spaceengineers_grid_count 1.0" in first
    assert "spaceengineers_grid_count 2.0" in second


def test_health_endpoint(server, registry):
    """Teste para /health antes e depois do primeiro ciclo."""
    body = requests.get(_url(server, "/health"), timeout=5).json()
    assert body["status"] == "starting"
    assert "process_num_threads" in body["process"]

    registry.record_task("server_status", True)
    registry.record_task("grid_count", False)
    registry.record_cycle(1_700_000_000.0, 0.5)
    body = requests.get(_url(server, "/health"), timeout=5).json()
    assert body["status"] == "degraded"
    assert body["last_cycle"]["tasks"] == {"server_status": True, "grid_count": False}
    assert body["last_cycle"]["started_at"] == 1_700_000_000.0


def test_unknown_path_is_404(server):
    assert requests.get(_url(server, "/nope"), timeout=5).status_code == 404


def test_build_health_ok(registry):
    registry.record_task("worlds", True)
    assert http_server.build_health(registry)["status"] == "ok"


def test_get_process_metrics_handles_psutil_errors(monkeypatch):
    class Boom:
        def __init__(self):
            raise http_server.psutil.AccessDenied()

    monkeypatch.setattr(http_server.psutil, "Process", Boom)
    assert http_server.get_process_metrics() == {}
