"""Parser de argumentos da linha de comando.

Este módulo fornece um parser simples que expõe:
- intervalo entre ciclos (-i / --interval), no formato de duração Go
- número de ciclos (-c / --cycles), 0 = infinito
- verbosidade (-v)
- opções de logging (nível e caminho raiz) e arquivo ``.env``

A CLI tem precedência sobre as variáveis de ambiente; o carregamento das
variáveis em si fica em ``config.settings``.
"""

import argparse
from typing import Sequence

# ========================
# 0. Configuração do parser e argumentos padrão
# ========================


# Função principal do módulo; cria e retorna o ArgumentParser configurado
def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna ArgumentParser configurado para o exporter."""
    parser = argparse.ArgumentParser(
        prog="torch-exporter",
        description="Exporter Prometheus para servidores Space Engineers geridos pelo Torch",
    )

    parser.add_argument(
        "-i",
        "--interval",
        type=str,
        default=None,
        help="Intervalo entre ciclos (ex.: 30s, 1m, 1h30m). Substitui INTERVAL",
    )
    parser.add_argument(
        "-c",
        "--cycles",
        type=int,
        default=0,
        help="Número de ciclos a executar (0 = infinito)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Aumenta a verbosidade (-v, -vv)",
    )
    parser.add_argument(
        "--log-root",
        dest="log_root",
        type=str,
        default=None,
        help="Diretório para os logs de debug (substitui EXPORTER_LOG_ROOT)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default=None,
        help="Nível de logging (DEBUG/INFO/WARNING/ERROR). Substitui LOG_LEVEL",
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        type=str,
        default=None,
        help="Arquivo .env a carregar (substitui EXPORTER_ENV_FILE)",
    )

    return parser


# ========================
# 1. Análise e validação
# ========================


# Auxilia main; criado para analisar argv e validar argumentos
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Analisa argv e retorna Namespace validado."""
    parser = configure_argparser()
    ns = parser.parse_args(argv)
    try:
        validate_args(ns)
    except ValueError as exc:
        # mesmo tratamento de argparse para valores inválidos: uso + exit 2
        parser.error(str(exc))
    return ns


# Auxilia parse_args; criado para garantir valores corretos
def validate_args(args: argparse.Namespace) -> None:
    """Valida e normaliza argumentos do exporter."""
    try:
        args.cycles = int(args.cycles)
    except (TypeError, ValueError) as exc:
        raise ValueError("cycles deve ser um inteiro >= 0") from exc
    if args.cycles < 0:
        raise ValueError("cycles deve ser >= 0")


# ========================
# 2. Overrides e logging
# ========================


def cli_overrides(args: argparse.Namespace) -> dict:
    """Variáveis de configuração fornecidas pela CLI (têm precedência sobre o ambiente)."""
    out = {}
    if getattr(args, "interval", None):
        out["INTERVAL"] = args.interval
    if getattr(args, "log_level", None):
        out["LOG_LEVEL"] = args.log_level
    return out


# Auxilia main; criado para extrair configuração de logging dos argumentos
def get_log_config(args: argparse.Namespace, default_level: str = "INFO") -> dict:
    """Retorna dict com configuração de logging ('level' e 'root')."""
    if getattr(args, "log_level", None):
        level = str(args.log_level).upper()
    else:
        v = getattr(args, "verbose", 0) or 0
        if v >= 1:
            level = "DEBUG"
        else:
            level = str(default_level or "INFO").upper()

    return {"level": level, "root": getattr(args, "log_root", None)}
