"""Pacote system: helpers de tempo e configuração de logging."""
