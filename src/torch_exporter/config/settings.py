"""Configurações do exporter.

Este módulo centraliza a leitura da configuração a partir de um arquivo
``.env`` opcional e das variáveis de ambiente do processo (o ambiente
sobrescreve o ``.env``). As funções públicas principais são:

- ``load_settings()`` -> ``Settings`` validado e imutável.
- ``validate_settings()`` -> converte um mapeamento cru em ``Settings``.

Host, porta e token do Torch são obrigatórios; a ausência de qualquer um
deles levanta ``ConfigError`` e o processo não arranca.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from ..errors import ConfigError
from ..system.time_helpers import parse_go_duration


# ========================
# Constantes e padrões globais
# ========================

REQUIRED_KEYS = ("TORCH_HOST", "TORCH_PORT", "TORCH_PASS")

DEFAULT_INTERVAL = "1m"
DEFAULT_SCHEME = "http"
DEFAULT_API_BASE = "/api/v1"
DEFAULT_EXPORTER_ADDR = "0.0.0.0"  # nosec B104
DEFAULT_EXPORTER_PORT = 9090
DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class Settings:
    """Configuração efetiva do exporter.

    ``interval`` e ``timeout`` estão em segundos; ``timeout`` é ``None``
    quando não configurado (usa o comportamento padrão do transporte).
    """

    torch_host: str
    torch_port: int
    torch_token: str
    interval: float = 60.0
    scheme: str = DEFAULT_SCHEME
    api_base: str = DEFAULT_API_BASE
    timeout: float | None = None
    track_player_sessions: bool = True
    exporter_addr: str = DEFAULT_EXPORTER_ADDR
    exporter_port: int = DEFAULT_EXPORTER_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    def __repr__(self) -> str:
        # nunca expor o token em logs
        return (
            f"Settings(torch_host={self.torch_host!r}, torch_port={self.torch_port}, "
            f"torch_token='***', interval={self.interval}, scheme={self.scheme!r}, "
            f"api_base={self.api_base!r}, timeout={self.timeout}, "
            f"track_player_sessions={self.track_player_sessions}, "
            f"exporter_addr={self.exporter_addr!r}, exporter_port={self.exporter_port}, "
            f"log_level={self.log_level!r})"
        )


# ========================
# 1. Carregamento das configurações
# ========================


# Função principal do módulo; carrega a configuração do .env + ambiente
def load_settings(env: Mapping[str, str] | None = None, env_file: str | Path | None = None) -> Settings:
    """Carrega e valida a configuração combinando ``.env`` + ambiente.

    Args:
        env: mapeamento usado no lugar de ``os.environ`` (útil em testes).
        env_file: caminho do arquivo ``.env``; por padrão ``EXPORTER_ENV_FILE``
            ou ``.env`` na raiz do projeto.

    Raises:
        ConfigError: quando uma chave obrigatória falta ou um valor é inválido.
    """
    import logging

    logger = logging.getLogger(__name__)
    environ = dict(os.environ if env is None else env)

    if env_file is None:
        project_root = Path(__file__).resolve().parents[3]
        env_file = environ.get("EXPORTER_ENV_FILE") or (project_root / ".env")

    items = _merge_env_items(Path(env_file), environ, logger)
    settings = validate_settings(items)
    logger.debug("Configuração carregada: %r", settings)
    return settings


# ========================
# 2. Funções auxiliares para ambiente
# ========================


# Auxilia load_settings; criado para centralizar leitura do .env
def _read_env_file(path: Path | str) -> dict:
    """Lê um arquivo `.env` e devolve um dicionário chave->valor.

    Linhas vazias e comentários (começando com '#') são ignorados.
    """
    import logging

    logger = logging.getLogger(__name__)
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                if key.startswith("export "):
                    key = key[len("export ") :].strip()
                val = val.strip().strip('"').strip("'")
                result[key] = val
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


# Auxilia load_settings; criado para unir variáveis do ambiente e .env
def _merge_env_items(env_path: Path, environ: Mapping[str, str], logger) -> dict:
    """Retorna um mapeamento combinado de `.env` e env vars do processo.

    As variáveis do processo sobrescrevem o arquivo `.env`.
    """
    env_items = _read_env_file(env_path)
    if env_items == {} and env_path.exists():
        logger.warning("Erro ou ficheiro .env vazio em %s", env_path)
    env_items.update(environ)
    return env_items


# ========================
# 3. Validação e normalização
# ========================


# Função principal de validação; converte o mapeamento cru em Settings
def validate_settings(items: Mapping[str, str]) -> Settings:
    """Valida o mapeamento de configuração e devolve ``Settings``."""
    missing = [k for k in REQUIRED_KEYS if not (items.get(k) or "").strip()]
    if missing:
        raise ConfigError(f"Defina {', '.join(REQUIRED_KEYS)} (em falta: {', '.join(missing)})")

    scheme = _get(items, "TORCH_SCHEME", DEFAULT_SCHEME).lower()
    if scheme not in ("http", "https"):
        raise ConfigError(f"TORCH_SCHEME inválido: {scheme!r}")

    api_base = _get(items, "TORCH_API_BASE", DEFAULT_API_BASE).rstrip("/")
    if api_base and not api_base.startswith("/"):
        api_base = "/" + api_base

    raw_timeout = _get(items, "TORCH_TIMEOUT", "")
    timeout = _coerce_duration("TORCH_TIMEOUT", raw_timeout) if raw_timeout else None

    return Settings(
        torch_host=items["TORCH_HOST"].strip(),
        torch_port=_coerce_port("TORCH_PORT", items["TORCH_PORT"]),
        torch_token=items["TORCH_PASS"].strip(),
        interval=_coerce_duration("INTERVAL", _get(items, "INTERVAL", DEFAULT_INTERVAL)),
        scheme=scheme,
        api_base=api_base,
        timeout=timeout,
        track_player_sessions=_coerce_bool("TRACK_PLAYER_SESSIONS", _get(items, "TRACK_PLAYER_SESSIONS", "1")),
        exporter_addr=_get(items, "EXPORTER_ADDR", DEFAULT_EXPORTER_ADDR),
        exporter_port=_coerce_port("EXPORTER_PORT", _get(items, "EXPORTER_PORT", str(DEFAULT_EXPORTER_PORT))),
        log_level=_get(items, "LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def _get(items: Mapping[str, str], key: str, default: str) -> str:
    val = items.get(key)
    if val is None or not str(val).strip():
        return default
    return str(val).strip()


# Auxilia validate_settings; criado para garantir porta TCP válida
def _coerce_port(key: str, raw: str) -> int:
    try:
        port = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} deve ser um inteiro: {raw!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"{key} fora do intervalo 1-65535: {port}")
    return port


# Auxilia validate_settings; INTERVAL inválido é fatal, sem fallback silencioso
def _coerce_duration(key: str, raw: str) -> float:
    try:
        seconds = parse_go_duration(raw)
    except ValueError as exc:
        raise ConfigError(f"Falha ao interpretar {key}: {exc}") from exc
    if seconds <= 0:
        raise ConfigError(f"{key} deve ser > 0: {raw!r}")
    return seconds


def _coerce_bool(key: str, raw: str) -> bool:
    val = raw.strip().lower()
    if val in _TRUE_VALUES:
        return True
    if val in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} inválido: {raw!r}")
