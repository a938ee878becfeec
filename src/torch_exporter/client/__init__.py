"""Pacote client: acesso HTTP à API remota do Torch."""

from .torch_client import TorchClient

__all__ = ["TorchClient"]
