"""Tarefas de coleta: uma função por recurso da API do Torch.

Cada tarefa busca um ou mais recursos via ``TorchClient``, transforma e
escreve no ``MetricRegistry``. Erros de transporte/decodificação sobem ao
scheduler, que os regista e segue para a próxima tarefa; os gauges
afetados mantêm o último valor escrito com sucesso.
"""

import logging
from functools import partial
from typing import Callable, NamedTuple
from urllib.parse import quote

from ..client.torch_client import TorchClient
from ..system.time_helpers import now as _now
from .models import PlayerEntry, ServerStatus, WorldSummary, decode_list
from .registry import MetricRegistry
from .sessions import SessionTracker

logger = logging.getLogger(__name__)


class CollectorTask(NamedTuple):
    """Tarefa nomeada executada pelo scheduler."""

    name: str
    run: Callable[[], None]


# ========================
# 1. Tarefas
# ========================


def collect_server_status(client: TorchClient, registry: MetricRegistry) -> None:
    """``GET /server/status`` -> sim speed, membros, estado e uptime."""
    status = client.fetch("/server/status", ServerStatus.from_json)
    registry.sim_speed.set(status.sim_speed)
    registry.player_count.set(status.member_count)
    registry.game_ready.set(int(status.status))
    registry.uptime.set(status.uptime.total_seconds())


def collect_grid_count(client: TorchClient, registry: MetricRegistry) -> None:
    """``GET /grids`` -> quantidade de grids."""
    grids = client.fetch("/grids", partial(decode_list, what="grids", item_type=int))
    registry.grid_count.set(len(grids))


def collect_banned_count(client: TorchClient, registry: MetricRegistry) -> None:
    """``GET /players/banned`` -> quantidade de banidos."""
    banned = client.fetch("/players/banned", partial(decode_list, what="banned players", item_type=int))
    registry.banned_count.set(len(banned))


def collect_worlds(client: TorchClient, registry: MetricRegistry) -> None:
    """``GET /worlds`` e ``GET /worlds/{id}`` -> tamanho por mundo.

    Labels de mundos que deixaram de existir não são removidos. Uma falha
    num mundo interrompe os restantes deste ciclo.
    """
    world_ids = client.fetch("/worlds", partial(decode_list, what="worlds", item_type=str))
    for world_id in world_ids:
        world = client.fetch(f"/worlds/{quote(world_id, safe='')}", WorldSummary.from_json)
        registry.set_world_size(world.name, world.size_kb)


def collect_players_online(
    client: TorchClient,
    registry: MetricRegistry,
    tracker: SessionTracker,
    clock: Callable[[], float] = _now,
) -> None:
    """``GET /players`` -> atualiza sessões e reconstrói o gauge de jogadores."""
    players = client.fetch("/players", PlayerEntry.list_from_json)
    samples = tracker.reconcile(players, clock())
    registry.replace_players(samples)
    logger.debug("%d jogadores online", len(samples))


# ========================
# 2. Montagem da lista de tarefas
# ========================


# Auxilia main; ordem fixa usada em todos os ciclos
def build_tasks(
    client: TorchClient,
    registry: MetricRegistry,
    tracker: SessionTracker | None = None,
    track_player_sessions: bool = True,
    clock: Callable[[], float] = _now,
) -> list[CollectorTask]:
    """Monta a lista ordenada de tarefas de um ciclo.

    Com ``track_player_sessions=False`` a tarefa de jogadores é omitida.
    """
    tasks = [
        CollectorTask("server_status", partial(collect_server_status, client, registry)),
        CollectorTask("grid_count", partial(collect_grid_count, client, registry)),
        CollectorTask("banned_count", partial(collect_banned_count, client, registry)),
        CollectorTask("worlds", partial(collect_worlds, client, registry)),
    ]
    if track_player_sessions:
        tracker = tracker if tracker is not None else SessionTracker()
        tasks.append(
            CollectorTask("players_online", partial(collect_players_online, client, registry, tracker, clock))
        )
    return tasks
