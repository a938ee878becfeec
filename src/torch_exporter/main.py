"""Ponto de entrada do exporter.

Este módulo realiza a inicialização da aplicação: parsing de argumentos CLI,
configuração de logging, carregamento da configuração, criação do registry
de métricas, arranque do servidor HTTP de scrape e execução do scheduler.
A lógica de runtime fica em ``core`` e ``monitoring`` para facilitar testes.
"""

import logging as _logging
import os
import signal
import sys
import threading

from .client.torch_client import TorchClient
from .config.settings import load_settings
from .core.args import cli_overrides, get_log_config, parse_args
from .core.scheduler import run_loop
from .errors import ConfigError
from .exporter.http_server import run_http_server
from .monitoring.collectors import build_tasks
from .monitoring.registry import MetricRegistry
from .monitoring.sessions import SessionTracker
from .system.logs import setup_logging

EXIT_CONFIG_ERROR = 2
EXIT_SERVER_ERROR = 1


def main(argv: list[str] | None = None) -> int:
    """Inicializa a aplicação e executa o scheduler até ser interrompido.

    Args:
        argv: Lista de argumentos (usada em testes). Quando ``None`` a função
            utiliza os argumentos de linha de comando do processo.

    Returns:
        Código de saída do processo (0 em paragem normal).
    """
    args = parse_args(argv)
    log_conf = get_log_config(args, default_level=os.getenv("LOG_LEVEL", "INFO"))
    setup_logging(log_conf["level"], log_conf["root"])
    logger = _logging.getLogger(__name__)

    # CLI > ambiente > .env
    env = dict(os.environ)
    env.update(cli_overrides(args))
    try:
        settings = load_settings(env=env, env_file=args.env_file)
    except ConfigError as exc:
        logger.error("Configuração inválida: %s", exc)
        return EXIT_CONFIG_ERROR

    if not args.log_level and not args.verbose:
        _logging.getLogger().setLevel(getattr(_logging, settings.log_level, _logging.INFO))

    registry = MetricRegistry()
    client = TorchClient.from_settings(settings)
    tasks = build_tasks(
        client,
        registry,
        tracker=SessionTracker(),
        track_player_sessions=settings.track_player_sessions,
    )

    try:
        server = run_http_server(registry, addr=settings.exporter_addr, port=settings.exporter_port)
    except OSError as exc:
        logger.error("Falha ao iniciar servidor HTTP de métricas: %s", exc)
        client.close()
        return EXIT_SERVER_ERROR

    stop_event = threading.Event()
    _install_signal_handlers(stop_event)

    try:
        run_loop(tasks, interval=settings.interval, cycles=args.cycles, registry=registry, stop_event=stop_event)
    except KeyboardInterrupt:
        logger.info("Recebido KeyboardInterrupt, saindo...")
    finally:
        server.shutdown()
        server.server_close()
        client.close()
    return 0


def _install_signal_handlers(stop_event: threading.Event) -> None:
    """SIGTERM/SIGINT pedem paragem do scheduler entre ciclos."""
    if threading.current_thread() is not threading.main_thread():
        return

    def _handler(signum, frame):
        _logging.getLogger(__name__).info("Sinal %s recebido, a terminar...", signum)
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, _handler)


if __name__ == "__main__":
    sys.exit(main())
