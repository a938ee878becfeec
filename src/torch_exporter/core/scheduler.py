"""Scheduler do exporter.

Executa todas as tarefas de coleta uma vez imediatamente e depois a cada
``interval`` segundos. Dentro de um ciclo as tarefas correm em sequência,
na ordem fixa recebida; o erro de uma tarefa é registado e o ciclo segue.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from ..errors import DecodeError, TransportError
from ..monitoring.collectors import CollectorTask
from ..monitoring.registry import MetricRegistry
from ..system.time_helpers import format_go_duration

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """Resultado de um ciclo: ``errors`` mapeia tarefa -> mensagem (None = ok)."""

    started_at: float
    duration: float = 0.0
    errors: dict[str, str | None] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(err is None for err in self.errors.values())


# ========================
# 1. Execução de um ciclo
# ========================


def run_cycle(tasks: Sequence[CollectorTask], registry: MetricRegistry | None = None) -> CycleReport:
    """Executa todas as tarefas em ordem, isolando falhas por tarefa."""
    logger.info("processing metrics")
    report = CycleReport(started_at=time.time())
    t0 = time.monotonic()
    for task in tasks:
        report.errors[task.name] = _run_task(task)
        if registry is not None:
            registry.record_task(task.name, report.errors[task.name] is None)
    report.duration = time.monotonic() - t0
    if registry is not None:
        registry.record_cycle(report.started_at, report.duration)
    logger.debug("ciclo concluído em %.3fs (ok=%s)", report.duration, report.ok)
    return report


# Auxilia run_cycle; fronteira de erro de cada tarefa
def _run_task(task: CollectorTask) -> str | None:
    try:
        task.run()
    except (TransportError, DecodeError) as exc:
        logger.warning("error processing metrics [%s]: %s", task.name, exc)
        return str(exc)
    except Exception as exc:
        # erro inesperado numa tarefa não pode derrubar o scheduler
        logger.error("erro inesperado na tarefa %s: %s", task.name, exc, exc_info=True)
        return f"{type(exc).__name__}: {exc}"
    return None


# ========================
# 2. Loop principal
# ========================


# Função principal do módulo; executa ciclos até o stop_event ou `cycles`
def run_loop(
    tasks: Sequence[CollectorTask],
    interval: float,
    cycles: int = 0,
    registry: MetricRegistry | None = None,
    stop_event: threading.Event | None = None,
    on_cycle: Callable[[CycleReport], None] | None = None,
) -> int:
    """Loop do scheduler.

    Parâmetros:
        tasks: tarefas na ordem de execução.
        interval: atraso entre inícios de ciclo em segundos.
        cycles: número de ciclos a executar (0 = infinito).
        registry: onde registar o estado das tarefas/ciclos (opcional).
        stop_event: quando definido, interrompe o loop entre ciclos.
        on_cycle: callback chamado com o ``CycleReport`` de cada ciclo.

    Retorna o número de ciclos executados.
    """
    stop_event = stop_event if stop_event is not None else threading.Event()
    logger.info("poll metrics every %s", format_go_duration(interval))

    executed = 0
    while not stop_event.is_set():
        report = run_cycle(tasks, registry)
        executed += 1
        if on_cycle is not None:
            try:
                on_cycle(report)
            except Exception as exc:
                logger.debug("on_cycle falhou: %s", exc, exc_info=True)
        if cycles != 0 and executed >= cycles:
            break
        # espera o restante do intervalo; acorda cedo se pedirem paragem
        wait = max(0.0, interval - report.duration)
        if stop_event.wait(wait):
            break
    logger.info("scheduler parado após %d ciclos", executed)
    return executed
