"""Hierarquia de erros do exporter.

- ``TransportError``: falha de rede/conexão/timeout ou status HTTP inesperado.
- ``DecodeError``: JSON malformado ou com formato diferente do esperado.
- ``ConfigError``: configuração obrigatória ausente ou inválida (fatal).
"""

__all__ = [
    "ExporterError",
    "TransportError",
    "DecodeError",
    "ConfigError",
]


class ExporterError(Exception):
    """Erro base do exporter."""


class TransportError(ExporterError):
    """Falha ao falar com a API remota."""


class DecodeError(ExporterError):
    """Resposta da API com JSON inválido ou fora do formato esperado."""


class ConfigError(ExporterError):
    """Configuração inválida; impede o arranque."""
