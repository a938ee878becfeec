"""Pacote core: orquestração principal do programa.

Contém o scheduler de ciclos de coleta e o parsing de argumentos.
"""

from .scheduler import run_cycle, run_loop

__all__ = ["run_cycle", "run_loop"]
