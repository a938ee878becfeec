"""Pacote monitoring: modelos da API, registry de métricas, coletores e sessões."""
