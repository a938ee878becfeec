"""Servidor HTTP: expõe ``/metrics`` e ``/health``.

``/metrics`` devolve o conteúdo do ``MetricRegistry`` no formato de
exposição do Prometheus, lido de forma síncrona a cada pedido (independente
da cadência dos polls). ``/health`` devolve JSON com o estado do último
ciclo e métricas do processo via ``psutil``.

O endereço padrão é 0.0.0.0; o serviço expõe nomes de jogadores, então
proteja o acesso com firewall ou rede privada quando necessário.
"""

import json
import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import psutil

from ..monitoring.registry import MetricRegistry

logger = logging.getLogger(__name__)

METRICS_PATH = "/metrics"
HEALTH_PATH = "/health"


class MetricsServer(ThreadingHTTPServer):
    """``ThreadingHTTPServer`` que carrega a referência ao ``MetricRegistry``."""

    daemon_threads = True

    def __init__(self, server_address, registry: MetricRegistry):
        self.registry = registry
        super().__init__(server_address, MetricsHandler)


class MetricsHandler(BaseHTTPRequestHandler):
    """HTTP handler para ``/metrics`` e ``/health``."""

    def do_GET(self):
        """Manipula requisições GET para /metrics, /health e outros endpoints."""
        path = self.path.split("?", 1)[0]
        registry: MetricRegistry = self.server.registry  # type: ignore[attr-defined]
        if path == METRICS_PATH:
            output = registry.exposition()
            self.send_response(200)
            self.send_header("Content-Type", registry.content_type)
            self.send_header("Content-Length", str(len(output)))
            self.end_headers()
            self.wfile.write(output)
        elif path == HEALTH_PATH:
            body = json.dumps(build_health(registry)).encode("utf-8")
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        else:
            self.send_response(404)
            self.end_headers()

    def log_message(self, format, *args):
        """Silencia logs de requisições HTTP no console."""
        pass


# ========================
# Helpers
# ========================


def build_health(registry: MetricRegistry) -> dict:
    """Monta o payload de ``/health`` a partir do registry e do processo."""
    tasks = {}
    for metric in registry.task_up.collect():
        for s in metric.samples:
            tasks[s.labels.get("task", "")] = bool(s.value)

    last_ts = registry.sample("torch_exporter_last_cycle_timestamp_seconds") or 0.0
    last_dur = registry.sample("torch_exporter_last_cycle_duration_seconds") or 0.0
    if not tasks:
        status = "starting"
    elif all(tasks.values()):
        status = "ok"
    else:
        status = "degraded"

    return {
        "status": status,
        "last_cycle": {
            "started_at": last_ts or None,
            "duration_seconds": last_dur,
            "tasks": tasks,
        },
        "process": get_process_metrics(),
    }


def get_process_metrics(prefix: str = "process_") -> dict:
    """Coleta métricas do processo em tempo real."""
    metrics: dict = {}
    try:
        proc = psutil.Process()
        metrics = {
            f"{prefix}cpu_percent": proc.cpu_percent(interval=0.0),
            f"{prefix}memory_rss_bytes": getattr(proc.memory_info(), "rss", 0),
            f"{prefix}uptime_seconds": float(max(0, (time.time() - proc.create_time()))),
            f"{prefix}num_threads": proc.num_threads(),
        }
    except psutil.Error as exc:
        logger.debug("Falha ao obter métricas do processo: %s", exc, exc_info=True)
    return metrics


def run_http_server(registry: MetricRegistry, addr: str = "0.0.0.0", port: int = 9090) -> MetricsServer:  # nosec B104
    """Cria o servidor e começa a servir num thread daemon.

    Retorna o servidor para que o chamador possa fazer ``shutdown()``.
    Falhas de bind (porta ocupada etc.) sobem como ``OSError``.
    """
    server = MetricsServer((addr, port), registry)
    thread = threading.Thread(target=server.serve_forever, name="metrics-http", daemon=True)
    thread.start()
    logger.info("Servindo em http://%s:%d (%s, %s)", addr, server.server_address[1], METRICS_PATH, HEALTH_PATH)
    return server
