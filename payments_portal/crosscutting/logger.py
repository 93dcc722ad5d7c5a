# payments_portal/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logger estructurado (JSON) con redacción de credenciales
===============================================================================

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  CredentialRedactor + PortalJSONFormatter + configure_logger()

Responsabilidades:
  - Una línea JSON por evento, con el RequestContext del request en curso
  - Nunca escribir material de credenciales: passwords, salts, hashes, JWTs
  - Acotar tamaño de extras (strings largos, estructuras profundas)

Colaboradores:
  - payments_portal/context.py (get_context_dict)
  - crosscutting/config.py (log_level, log_json)

Notas:
  - Redacción por nombre de clave y, además, por contenido: un JWT o un
    "Bearer ..." dentro de un mensaje libre también se enmascara.
===============================================================================
"""

from __future__ import annotations

import json
import logging
import re
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

REDACTED = "[REDACTED]"
LOGGER_NAME = "payments-portal"

_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "new_password",
        "password_hash",
        "salt",
        "secret",
        "jwt_secret",
        "jwt_refresh_secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "cookie",
        "set-cookie",
    }
)

_JWT_PATTERN = re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+")
_BEARER_PATTERN = re.compile(r"(?i)\bbearer\s+\S+")

# Atributos estándar de LogRecord: todo lo demás viene de `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class CredentialRedactor:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      CredentialRedactor

    Responsabilidades:
      - scrub(value, key): copia segura para serializar

    Colaboradores:
      - PortalJSONFormatter
    ----------------------------------------------------------------------------
    """

    def __init__(self, *, max_chars: int = 4_000, max_depth: int = 4) -> None:
        self._max_chars = max_chars
        self._max_depth = max_depth

    def scrub_text(self, text: str) -> str:
        text = _BEARER_PATTERN.sub(f"Bearer {REDACTED}", text)
        text = _JWT_PATTERN.sub(REDACTED, text)
        if len(text) > self._max_chars:
            return text[: self._max_chars] + "...[truncated]"
        return text

    def scrub(self, value: Any, key: str | None = None, depth: int = 0) -> Any:
        if key is not None and key.lower() in _SENSITIVE_KEYS:
            return REDACTED
        if depth > self._max_depth:
            return "[truncated]"
        if isinstance(value, str):
            return self.scrub_text(value)
        if value is None or isinstance(value, (bool, int, float)):
            return value
        if isinstance(value, dict):
            return {
                str(k): self.scrub(v, str(k), depth + 1) for k, v in value.items()
            }
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.scrub(v, key, depth + 1) for v in value]
        if isinstance(value, (bytes, bytearray)):
            return f"<{len(value)} bytes>"
        # UUID, Decimal, datetime, Enum: su str() es la forma legible.
        return self.scrub_text(str(value))


class PortalJSONFormatter(logging.Formatter):
    """LogRecord -> JSON (timestamp, nivel, contexto, extras, excepción)."""

    def __init__(self, redactor: CredentialRedactor | None = None) -> None:
        super().__init__()
        self._redactor = redactor or CredentialRedactor()

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": self._redactor.scrub_text(record.getMessage()),
            "src": f"{record.module}:{record.lineno}",
        }
        entry.update(get_context_dict())

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = self._redactor.scrub(value, key)

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": self._redactor.scrub_text(str(exc)),
                "stacktrace": self._redactor.scrub_text(
                    "".join(traceback.format_exception(exc_type, exc, tb))
                ),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logger(
    name: str = LOGGER_NAME,
    *,
    level: str | None = None,
    json_output: bool | None = None,
) -> logging.Logger:
    """
    Configura (una sola vez) el logger del portal.

    Sin argumentos toma log_level / log_json de Settings; si Settings es
    inválido se loguea igual (INFO, JSON) para poder reportar el error.
    """
    if level is None or json_output is None:
        try:
            from .config import get_settings

            settings = get_settings()
            level = level or settings.log_level
            json_output = settings.log_json if json_output is None else json_output
        except ValueError:
            level = level or "INFO"
            json_output = True if json_output is None else json_output

    log = logging.getLogger(name)
    log.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if json_output:
            handler.setFormatter(PortalJSONFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
            )
        log.addHandler(handler)

    return log


logger = configure_logger()
