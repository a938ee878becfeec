"""Helpers de tempo: parsing de durações e relógio usado pelos coletores.

Dois formatos de duração aparecem no exporter:

- durações no estilo Go (``"1m"``, ``"30s"``, ``"1h2m3.5s"``) usadas na
  configuração (``INTERVAL``, ``TORCH_TIMEOUT``);
- o formato ``"H:MM:SS"`` usado pela API do Torch no campo ``uptime``.
"""

import re
import time

# Multiplicadores (em segundos) das unidades aceitas por ``parse_go_duration``
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_GO_PART_RE = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")
_HMS_RE = re.compile(r"([0-9]+):([0-9]{2}):([0-9]{2})")


def now() -> float:
    """Retorne o timestamp atual (epoch em segundos, relógio de parede)."""
    return time.time()


# Auxilia config.settings; criado para aceitar o mesmo formato de INTERVAL do Go
def parse_go_duration(value: str) -> float:
    """Converta uma duração no estilo Go para segundos.

    Aceita sinal opcional e uma sequência de pares número+unidade, por
    exemplo ``"1m30s"`` ou ``"1.5h"``. ``"0"`` é aceito sozinho.

    Raises:
        ValueError: quando a string não é uma duração válida.
    """
    if not isinstance(value, str):
        raise ValueError(f"duração inválida: {value!r}")
    s = value.strip()
    if not s:
        raise ValueError("duração vazia")

    sign = 1.0
    if s[0] in "+-":
        if s[0] == "-":
            sign = -1.0
        s = s[1:]
    if s == "0":
        return 0.0
    if not s:
        raise ValueError(f"duração inválida: {value!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _GO_PART_RE.match(s, pos)
        if m is None:
            raise ValueError(f"duração inválida: {value!r}")
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()
    return sign * total


def format_go_duration(seconds: float) -> str:
    """Formate segundos no estilo curto do Go (ex.: ``1m0s``, ``1h30m0s``)."""
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    rem = abs(float(seconds))
    hours = int(rem // 3600)
    rem -= hours * 3600
    minutes = int(rem // 60)
    rem -= minutes * 60
    secs = f"{rem:.9f}".rstrip("0").rstrip(".")
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


def parse_hms(value: str) -> int:
    """Converta ``"H:MM:SS"`` para o total de segundos.

    Horas sem limite de dígitos; minutos e segundos com exatamente dois
    dígitos. Qualquer outro formato levanta ``ValueError``.
    """
    if not isinstance(value, str):
        raise ValueError(f"uptime deve ser string, recebido {type(value).__name__}")
    m = _HMS_RE.fullmatch(value)
    if m is None:
        raise ValueError(f"uptime com formato inesperado: {value!r}")
    hours, minutes, seconds = (int(g) for g in m.groups())
    return hours * 3600 + minutes * 60 + seconds
