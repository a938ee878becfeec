"""Rastreamento de sessões de jogadores entre polls.

A API do Torch não informa quando o jogador entrou. O ``SessionTracker``
correlaciona snapshots sucessivos da lista de jogadores online e guarda o
primeiro instante em que cada ``client_id`` foi visto continuamente online.
Um jogador ausente num poll é removido no mesmo passo (sem janela de graça).

O estado é privado ao thread do scheduler; não há sincronização.
"""

import logging
import math
from typing import Iterable, NamedTuple

from .models import PlayerEntry

logger = logging.getLogger(__name__)


class SessionSample(NamedTuple):
    """Amostra do gauge de jogadores: labels ``(name, steam_id)`` e segundos online."""

    name: str
    steam_id: str
    seconds: float


class SessionTracker:
    """Mantém ``client_id -> timestamp da primeira observação``."""

    def __init__(self) -> None:
        self._sessions: dict[int, float] = {}

    @property
    def sessions(self) -> dict[int, float]:
        """Cópia do mapa de sessões atual."""
        return dict(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._sessions

    def joined_at(self, client_id: int) -> float | None:
        return self._sessions.get(client_id)

    def reconcile(self, players: Iterable[PlayerEntry], now: float) -> list[SessionSample]:
        """Atualiza as sessões com o snapshot atual e devolve as amostras.

        1. ``client_id`` novo recebe ``join = now``; um já conhecido mantém o seu.
        2. Cada jogador gera ``floor(now - join)`` segundos com labels
           ``(name, str(client_id))``.
        3. IDs conhecidos que não aparecem no snapshot são removidos.

        A lista devolvida é o conjunto completo de amostras do poll.
        """
        samples: list[SessionSample] = []
        seen: set[int] = set()

        for p in players:
            joined = self._sessions.get(p.client_id)
            if joined is None:
                joined = now
                self._sessions[p.client_id] = now
                logger.debug("Jogador %s (%s) entrou", p.name, p.client_id)
            seen.add(p.client_id)
            seconds = float(math.floor(max(0.0, now - joined)))
            samples.append(SessionSample(p.name, str(p.client_id), seconds))

        for client_id in [k for k in self._sessions if k not in seen]:
            del self._sessions[client_id]
            logger.debug("Jogador %s saiu; sessão removida", client_id)

        return samples
