"""Estruturas tipadas das respostas da API do Torch.

Cada tipo expõe ``from_json`` que valida o formato recebido e levanta
``DecodeError`` quando o JSON não corresponde ao esperado. Os decoders são
passados ao ``TorchClient.fetch`` pelos coletores.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import Any

from ..errors import DecodeError
from ..system.time_helpers import parse_hms

logger = logging.getLogger(__name__)


class StatusCode(IntEnum):
    """Estado do servidor de jogo, como enviado pela API."""

    STOPPED = 0
    STARTING = 1
    RUNNING = 2
    CRASHED = 3


# ========================
# 1. Helpers de validação
# ========================


def _require_dict(raw: Any, what: str) -> dict:
    if not isinstance(raw, dict):
        raise DecodeError(f"{what}: esperado objeto JSON, recebido {type(raw).__name__}")
    return raw


def _field(raw: dict, key: str, what: str) -> Any:
    if key not in raw:
        raise DecodeError(f"{what}: campo {key!r} ausente")
    return raw[key]


def _as_int(value: Any, key: str, what: str) -> int:
    # bool é subclasse de int; JSON true/false não é número válido aqui
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{what}: campo {key!r} deve ser inteiro, recebido {value!r}")
    return value


def _as_float(value: Any, key: str, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{what}: campo {key!r} deve ser numérico, recebido {value!r}")
    return float(value)


def _as_str(value: Any, key: str, what: str) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"{what}: campo {key!r} deve ser string, recebido {value!r}")
    return value


def decode_uptime(raw: Any) -> timedelta:
    """Decodifique o campo ``uptime`` (``"H:MM:SS"``) para ``timedelta``.

    Apenas strings são aceitas; número, objeto, lista ou string malformada
    levantam ``DecodeError``.
    """
    try:
        return timedelta(seconds=parse_hms(raw))
    except ValueError as exc:
        raise DecodeError(str(exc)) from exc


def decode_list(raw: Any, what: str = "lista", item_type: type | None = None) -> list:
    """Garanta que a resposta é uma lista JSON (``null`` vira lista vazia).

    Com ``item_type`` cada elemento tem de ser desse tipo (``bool`` não conta
    como ``int``); caso contrário levanta ``DecodeError``.
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DecodeError(f"{what}: esperado array JSON, recebido {type(raw).__name__}")
    if item_type is not None:
        for idx, item in enumerate(raw):
            if isinstance(item, bool) or not isinstance(item, item_type):
                raise DecodeError(f"{what}: elemento {idx} deve ser {item_type.__name__}, recebido {item!r}")
    return raw


# ========================
# 2. Tipos da API
# ========================


@dataclass(frozen=True)
class ServerStatus:
    """Resposta de ``GET /server/status``."""

    sim_speed: float
    member_count: int
    uptime: timedelta
    status: StatusCode | int

    @classmethod
    def from_json(cls, raw: Any) -> "ServerStatus":
        what = "server status"
        d = _require_dict(raw, what)
        code = _as_int(_field(d, "status", what), "status", what)
        try:
            status: StatusCode | int = StatusCode(code)
        except ValueError:
            # código novo da API: publica o inteiro cru em vez de descartar o payload
            logger.warning("%s: status desconhecido %d; publicado sem mapeamento", what, code)
            status = code
        return cls(
            sim_speed=_as_float(_field(d, "simSpeed", what), "simSpeed", what),
            member_count=_as_int(_field(d, "memberCount", what), "memberCount", what),
            uptime=decode_uptime(_field(d, "uptime", what)),
            status=status,
        )


@dataclass(frozen=True)
class PlayerEntry:
    """Jogador online, item de ``GET /players``."""

    client_id: int
    name: str
    promote_level: int = 0

    @classmethod
    def from_json(cls, raw: Any) -> "PlayerEntry":
        what = "player"
        d = _require_dict(raw, what)
        promote = d.get("promoteLevel", 0)
        return cls(
            client_id=_as_int(_field(d, "clientID", what), "clientID", what),
            name=_as_str(d.get("name", ""), "name", what),
            promote_level=_as_int(promote, "promoteLevel", what) if promote is not None else 0,
        )

    @classmethod
    def list_from_json(cls, raw: Any) -> "list[PlayerEntry]":
        return [cls.from_json(item) for item in decode_list(raw, "players")]


@dataclass(frozen=True)
class WorldSummary:
    """Resposta de ``GET /worlds/{id}``."""

    name: str
    size_kb: int

    @classmethod
    def from_json(cls, raw: Any) -> "WorldSummary":
        what = "world"
        d = _require_dict(raw, what)
        return cls(
            name=_as_str(_field(d, "name", what), "name", what),
            size_kb=_as_int(_field(d, "sizeKb", what), "sizeKb", what),
        )
