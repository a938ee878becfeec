"""Pacote exporter: servidor HTTP de scrape (``/metrics`` e ``/health``)."""

from .http_server import run_http_server

__all__ = ["run_http_server"]
