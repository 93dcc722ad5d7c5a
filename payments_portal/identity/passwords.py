"""
===============================================================================
TARJETA CRC — identity/passwords.py
===============================================================================

Módulo:
    Password Hasher (Argon2id + salt por empleado)

Responsabilidades:
    - Derivar password_hash = argon2id(plaintext + salt).
    - Verificar candidatos sin revelar por timing la causa del fallo.
    - Generar material nuevo (hash + salt) al fijar un password.
    - Ejecutar el hashing (CPU + memoria) en un pool acotado.

Colaboradores:
    - argon2-cffi: PasswordHasher (Type.ID).
    - crosscutting.exceptions: PasswordValidationFailed, OperationTimeout.
    - crosscutting.timing.Deadline: espera acotada en el pool.
    - application/usecases/auth/login_employee.py
    - application/dev_seed_employee.py, scripts/create_demo_employee.py

Decisiones de diseño:
    - Salt de 256 bits en hex (secrets.token_hex(32)) concatenado al plaintext;
      argon2 además agrega su propia sal interna al hash codificado.
    - Hash corrupto: se corre una verificación señuelo completa y luego se
      levanta PasswordValidationFailed (InternalFailure). Nunca se incluye el hash
      ni la sal en el mensaje.
    - Usuario inexistente: verify_decoy() iguala el costo de un fallo real.
===============================================================================
"""

from __future__ import annotations

import secrets
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..crosscutting.exceptions import OperationTimeout, PasswordValidationFailed
from ..crosscutting.logger import logger
from ..crosscutting.timing import Deadline, remaining_or_none

T = TypeVar("T")

SALT_BYTES: int = 32

DEFAULT_MEMORY_COST_KIB: int = 65536
DEFAULT_PARALLELISM: int = 2
DEFAULT_TIME_COST: int = 3

_DECOY_PLAINTEXT = "decoy-password-never-valid"


def generate_salt() -> str:
    """Sal nueva de 256 bits en hex."""
    return secrets.token_hex(SALT_BYTES)


@dataclass(frozen=True, slots=True)
class PasswordMaterial:
    """Resultado de fijar un password (hash + sal + sello de tiempo)."""

    password_hash: str = field(repr=False)
    salt: str = field(repr=False)
    changed_at: datetime


class Argon2PasswordHasher:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      Argon2PasswordHasher

    Responsabilidades:
      - hash(plaintext, salt) / verify(plaintext, salt, hashed)
      - new_password(plaintext) -> PasswordMaterial
      - verify_decoy(plaintext) para usuarios inexistentes

    Colaboradores:
      - argon2.PasswordHasher
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        *,
        memory_cost: int = DEFAULT_MEMORY_COST_KIB,
        parallelism: int = DEFAULT_PARALLELISM,
        time_cost: int = DEFAULT_TIME_COST,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        self._decoy_hash: str | None = None
        self._decoy_lock = threading.Lock()

    def hash(self, plaintext: str, salt: str) -> str:
        return self._hasher.hash(plaintext + salt)

    def verify(self, plaintext: str, salt: str, hashed: str) -> bool:
        """
        True si coincide, False si no.

        Raises:
            PasswordValidationFailed: hash almacenado ilegible o verificación rota.
        """
        try:
            return self._hasher.verify(hashed, plaintext + salt)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            self.verify_decoy(plaintext)
            logger.error(
                "Password hasher: hash almacenado inválido",
                extra={"error_type": type(exc).__name__},
            )
            raise PasswordValidationFailed(
                "Stored password material could not be verified"
            ) from exc

    def verify_decoy(self, plaintext: str) -> None:
        """Verificación completa contra un hash señuelo (resultado descartado)."""
        try:
            self._hasher.verify(self._get_decoy_hash(), plaintext + generate_salt())
        except VerifyMismatchError:
            pass

    def new_password(self, plaintext: str) -> PasswordMaterial:
        salt = generate_salt()
        return PasswordMaterial(
            password_hash=self.hash(plaintext, salt),
            salt=salt,
            changed_at=datetime.now(timezone.utc),
        )

    def _get_decoy_hash(self) -> str:
        with self._decoy_lock:
            if self._decoy_hash is None:
                self._decoy_hash = self._hasher.hash(_DECOY_PLAINTEXT)
            return self._decoy_hash


class HashingWorkerPool:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      HashingWorkerPool

    Responsabilidades:
      - Ejecutar hashing fuera del thread del request
      - Acotar concurrencia (y por ende memoria: memory_cost * workers)
      - Respetar el deadline del caller

    Colaboradores:
      - concurrent.futures.ThreadPoolExecutor
      - crosscutting.timing.Deadline
    ----------------------------------------------------------------------------
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="argon2"
        )

    def run(
        self,
        fn: Callable[..., T],
        *args: Any,
        deadline: Deadline | None = None,
    ) -> T:
        """
        Ejecuta fn(*args) en el pool esperando a lo sumo el tiempo restante.

        Raises:
            OperationTimeout: venció el deadline (antes o durante el hashing).
        """
        if deadline is not None:
            deadline.ensure_not_expired("password hashing")

        future: Future[T] = self._executor.submit(fn, *args)
        try:
            return future.result(timeout=remaining_or_none(deadline))
        except FutureTimeoutError as exc:
            future.cancel()
            raise OperationTimeout("Deadline exceeded during password hashing") from exc

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
