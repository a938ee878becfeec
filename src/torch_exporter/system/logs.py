"""Configuração de logging do exporter.

Configura o logger root (console) e, quando um diretório de logs é
informado, instala dois handlers de ficheiro para debug: um texto legível
(``.log``) e um JSONL (uma linha de JSON por evento) para ingestão. Também
instala um ``sys.excepthook`` que envia exceções não tratadas para o logger
root.
"""

import json as _json
import logging as _logging
import os
import sys
import types as _types
from datetime import datetime, timezone
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEBUG_LOG_FILENAME = "debug_log"


def setup_logging(level: str = "INFO", log_root: str | Path | None = None) -> None:
    """Configura o logging do processo.

    Args:
        level: nome do nível (DEBUG/INFO/WARNING/ERROR).
        log_root: diretório para os handlers de debug; ``None`` usa
            ``EXPORTER_LOG_ROOT`` e, se ausente, não cria ficheiros.
    """
    lvl = getattr(_logging, str(level).upper(), _logging.INFO)
    if not isinstance(lvl, int):
        lvl = _logging.INFO
    _logging.basicConfig(level=lvl, format=LOG_FORMAT)
    _logging.getLogger().setLevel(lvl)
    # urllib3 é verboso em DEBUG (uma linha por conexão)
    _logging.getLogger("urllib3").setLevel(max(lvl, _logging.INFO))

    root_dir = log_root if log_root else os.getenv("EXPORTER_LOG_ROOT")
    if root_dir:
        try:
            setup_debug_file_handler(get_debug_file_path(root_dir))
        except OSError as exc:
            _logging.getLogger(__name__).warning("falha ao configurar debug file handler: %s", exc)


def get_debug_file_path(root: str | Path) -> Path:
    """Caminho do ficheiro de debug do dia em ``<root>/debug``."""
    debug_dir = Path(root) / "debug"
    debug_dir.mkdir(parents=True, exist_ok=True)
    date_str = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return debug_dir / f"{DEBUG_LOG_FILENAME}-{date_str}.log"


def setup_debug_file_handler(debug_path: Path) -> None:
    """Instala handlers de ficheiro para debug e hook global de exceções.

    Evita duplicar handlers se já existirem handlers de ficheiro com os
    mesmos caminhos. O ``emit`` de cada handler é embrulhado para que uma
    falha de escrita não provoque falhas na aplicação.
    """
    fh = _logging.FileHandler(str(debug_path), encoding="utf-8")
    fh.setLevel(_logging.INFO)
    fh.setFormatter(_logging.Formatter(LOG_FORMAT))

    jpath = debug_path.with_suffix(".jsonl")
    jfh = _logging.FileHandler(str(jpath), encoding="utf-8")
    jfh.setLevel(_logging.INFO)
    jfh.setFormatter(JSONFormatter())

    root = _logging.getLogger()
    if _has_existing_file_handler(root, fh, jfh):
        fh.close()
        jfh.close()
    else:
        _wrap_emit_safe(fh)
        _wrap_emit_safe(jfh)
        root.addHandler(fh)
        root.addHandler(jfh)

    def _exc_hook(exc_type, exc_value, exc_tb):
        try:
            root.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))
        except Exception:
            sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _exc_hook


class JSONFormatter(_logging.Formatter):
    """Uma linha JSON por registo: ts, level, name, msg e exc (se houver)."""

    def format(self, record):
        obj = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            obj["exc"] = self.formatException(record.exc_info)
        return _json.dumps(obj, ensure_ascii=False)


def _has_existing_file_handler(root, fh, jfh):
    bases = (getattr(fh, "baseFilename", None), getattr(jfh, "baseFilename", None))
    for h in root.handlers:
        if isinstance(h, _logging.FileHandler) and getattr(h, "baseFilename", None) in bases:
            return True
    return False


def _wrap_emit_safe(handler):
    orig = handler.emit

    def _emit_safe(self, record):
        try:
            return orig(record)
        except Exception:
            # handler.handleError escreve em stderr sem relançar
            self.handleError(record)

    handler.emit = _types.MethodType(_emit_safe, handler)  # type: ignore[assignment]
