"""Exporter Prometheus para servidores Space Engineers geridos pelo Torch.

Consulta periodicamente a API remota do Torch e republica campos
selecionados como gauges para scraping.
"""

__version__ = "0.3.0"
