import importlib

import pytest

main_mod = importlib.import_module("torch_exporter.main")


@pytest.fixture
def no_side_effects(monkeypatch):
    """Evita handlers de sinal e logging em ficheiro durante os testes."""
    monkeypatch.setattr(main_mod, "_install_signal_handlers", lambda ev: None)
    monkeypatch.setattr(main_mod, "setup_logging", lambda level, root: None)
    monkeypatch.delenv("EXPORTER_ENV_FILE", raising=False)


@pytest.mark.parametrize("missing", ["TORCH_HOST", "TORCH_PORT", "TORCH_PASS"])
def test_missing_config_fails_before_any_network_call(monkeypatch, tmp_path, no_side_effects, missing):
    """Configuração obrigatória ausente termina com erro antes de qualquer pedido."""
    env = {"TORCH_HOST": "torch.local", "TORCH_PORT": "8080", "TORCH_PASS": "tok"}
    for key in env:
        monkeypatch.delenv(key, raising=False)
    for key, val in env.items():
        if key != missing:
            monkeypatch.setenv(key, val)

    def _boom(*a, **k):
        raise AssertionError("não deveria criar cliente nem servidor")

    monkeypatch.setattr(main_mod.TorchClient, "from_settings", _boom)
    monkeypatch.setattr(main_mod, "run_http_server", _boom)

    rc = main_mod.main(["--env-file", str(tmp_path / "none.env")])
    assert rc == main_mod.EXIT_CONFIG_ERROR


def test_invalid_interval_is_fatal(monkeypatch, tmp_path, no_side_effects):
    monkeypatch.setenv("TORCH_HOST", "h")
    monkeypatch.setenv("TORCH_PORT", "1")
    monkeypatch.setenv("TORCH_PASS", "p")
    monkeypatch.setattr(main_mod, "run_http_server", lambda *a, **k: pytest.fail("servidor iniciado"))
    rc = main_mod.main(["--interval", "often", "--env-file", str(tmp_path / "none.env")])
    assert rc == main_mod.EXIT_CONFIG_ERROR


def test_main_wires_registry_server_and_loop(monkeypatch, tmp_path, no_side_effects):
    """Main deve partilhar o mesmo registry entre servidor e scheduler."""
    monkeypatch.setenv("TORCH_HOST", "torch.local")
    monkeypatch.setenv("TORCH_PORT", "8080")
    monkeypatch.setenv("TORCH_PASS", "tok")
    monkeypatch.setenv("TRACK_PLAYER_SESSIONS", "0")
    monkeypatch.setenv("EXPORTER_PORT", "9191")
    seen = {}

    class FakeServer:
        def shutdown(self):
            seen["shutdown"] = True

        def server_close(self):
            seen["closed"] = True

    def fake_run_http_server(registry, addr, port):
        seen["server_registry"] = registry
        seen["port"] = port
        return FakeServer()

    def fake_run_loop(tasks, interval, cycles, registry, stop_event):
        seen["tasks"] = [t.name for t in tasks]
        seen["interval"] = interval
        seen["cycles"] = cycles
        seen["loop_registry"] = registry
        return cycles

    monkeypatch.setattr(main_mod, "run_http_server", fake_run_http_server)
    monkeypatch.setattr(main_mod, "run_loop", fake_run_loop)

    rc = main_mod.main(["-i", "15s", "-c", "1", "--env-file", str(tmp_path / "none.env")])

    assert rc == 0
    assert seen["server_registry"] is seen["loop_registry"]
    assert seen["port"] == 9191
    assert seen["interval"] == 15.0
    assert seen["cycles"] == 1
    assert seen["tasks"] == ["server_status", "grid_count", "banned_count", "worlds"]
    assert seen["shutdown"] and seen["closed"]


def test_server_bind_failure_exits_non_zero(monkeypatch, tmp_path, no_side_effects):
    monkeypatch.setenv("TORCH_HOST", "h")
    monkeypatch.setenv("TORCH_PORT", "1")
    monkeypatch.setenv("TORCH_PASS", "p")

    def _bind_fail(*a, **k):
        raise OSError("Address already in use")

    monkeypatch.setattr(main_mod, "run_http_server", _bind_fail)
    monkeypatch.setattr(main_mod, "run_loop", lambda *a, **k: pytest.fail("loop iniciado"))
    assert main_mod.main(["--env-file", str(tmp_path / "none.env")]) == main_mod.EXIT_SERVER_ERROR
