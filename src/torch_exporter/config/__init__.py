"""Pacote config: carregamento e validação da configuração do exporter."""

from .settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
