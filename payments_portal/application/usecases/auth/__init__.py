"""
===============================================================================
AUTH USE CASES PACKAGE (Public API / Exports)
===============================================================================

Exporta los casos de uso del Authentication Service y sus resultados.
===============================================================================
"""

from __future__ import annotations

from .auth_results import (
    AuthError,
    AuthErrorCode,
    LoginResult,
    LogoutResult,
    ProfileResult,
    RefreshResult,
)
from .get_current_employee import GetCurrentEmployeeUseCase
from .login_employee import LoginEmployeeUseCase
from .logout_employee import LogoutEmployeeUseCase
from .refresh_session import RefreshSessionUseCase

__all__ = [
    # Use cases
    "LoginEmployeeUseCase",
    "RefreshSessionUseCase",
    "LogoutEmployeeUseCase",
    "GetCurrentEmployeeUseCase",
    # Results
    "AuthError",
    "AuthErrorCode",
    "LoginResult",
    "RefreshResult",
    "LogoutResult",
    "ProfileResult",
]
