"""Registro de métricas exportadas.

Agrupa os gauges do exporter num ``CollectorRegistry`` próprio (sem usar o
registry global do ``prometheus_client``). Uma instância é criada no
arranque e partilhada entre o scheduler (escrita) e o handler HTTP
(leitura). Cada gauge do ``prometheus_client`` tem lock interno, então
leituras concorrentes durante um ciclo são seguras por instrumento.
"""

import logging

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest

logger = logging.getLogger(__name__)

METRIC_PREFIX = "spaceengineers"
SELF_PREFIX = "torch_exporter"


class MetricRegistry:
    """Conjunto fixo de gauges (escalares e com labels) do exporter."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        r = self.registry

        self.sim_speed = Gauge(f"{METRIC_PREFIX}_sim_speed", "Velocidade da simulação (1.0 = tempo real)", registry=r)
        self.player_count = Gauge(f"{METRIC_PREFIX}_player_count", "Membros conectados ao servidor", registry=r)
        self.game_ready = Gauge(
            f"{METRIC_PREFIX}_game_ready",
            "Estado do servidor (0=STOPPED, 1=STARTING, 2=RUNNING, 3=CRASHED)",
            registry=r,
        )
        self.uptime = Gauge(f"{METRIC_PREFIX}_uptime", "Uptime do servidor em segundos", registry=r)
        self.grid_count = Gauge(f"{METRIC_PREFIX}_grid_count", "Quantidade de grids no mundo", registry=r)
        self.banned_count = Gauge(f"{METRIC_PREFIX}_banned_player_count", "Quantidade de jogadores banidos", registry=r)
        self.world_size = Gauge(
            f"{METRIC_PREFIX}_world_size", "Tamanho do mundo em KB", ["world"], registry=r
        )
        self.players_online = Gauge(
            f"{METRIC_PREFIX}_players",
            "Segundos online por jogador na sessão atual",
            ["name", "steamID"],
            registry=r,
        )

        # métricas do próprio exporter
        self.task_up = Gauge(
            f"{SELF_PREFIX}_task_up", "1 se a última execução da tarefa teve sucesso", ["task"], registry=r
        )
        self.last_cycle_timestamp = Gauge(
            f"{SELF_PREFIX}_last_cycle_timestamp_seconds", "Início do último ciclo (epoch)", registry=r
        )
        self.last_cycle_duration = Gauge(
            f"{SELF_PREFIX}_last_cycle_duration_seconds", "Duração do último ciclo", registry=r
        )

    # ========================
    # Escrita
    # ========================

    def set_world_size(self, world: str, size_kb: float) -> None:
        self.world_size.labels(world=world).set(float(size_kb))

    def replace_players(self, samples) -> None:
        """Substitui todas as séries de jogadores pelas amostras informadas.

        ``samples`` é um iterável de ``(name, steam_id, seconds)``. Séries de
        jogadores ausentes são removidas (reset antes de repovoar).
        """
        self.players_online.clear()
        for name, steam_id, seconds in samples:
            self.players_online.labels(name=name, steamID=str(steam_id)).set(float(seconds))

    def record_task(self, task: str, ok: bool) -> None:
        self.task_up.labels(task=task).set(1.0 if ok else 0.0)

    def record_cycle(self, started_at: float, duration: float) -> None:
        self.last_cycle_timestamp.set(started_at)
        self.last_cycle_duration.set(duration)

    # ========================
    # Leitura
    # ========================

    def sample(self, name: str, labels: dict | None = None) -> float | None:
        """Valor atual de uma amostra, ou ``None`` se não existir."""
        return self.registry.get_sample_value(name, labels or {})

    def exposition(self) -> bytes:
        """Gera o texto no formato de exposição do Prometheus."""
        return generate_latest(self.registry)
