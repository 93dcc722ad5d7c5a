"""
===============================================================================
USE CASE: Get Current Employee (perfil del actor autenticado)
===============================================================================

Class:
    GetCurrentEmployeeUseCase

Responsibilities:
    - Releer el empleado desde el Credential Store y devolver su perfil público.

Collaborators:
    - EmployeeRepository.get_by_id
===============================================================================
"""

from __future__ import annotations

from ....domain.repositories import EmployeeRepository
from ....identity.employees import EmployeeContext
from .auth_results import AuthError, AuthErrorCode, ProfileResult


class GetCurrentEmployeeUseCase:
    def __init__(self, employee_repository: EmployeeRepository) -> None:
        self._employees = employee_repository

    def execute(self, actor: EmployeeContext) -> ProfileResult:
        employee = self._employees.get_by_id(actor.id)
        if employee is None:
            return ProfileResult(
                error=AuthError(
                    code=AuthErrorCode.NOT_FOUND, message="Employee not found"
                )
            )
        return ProfileResult(profile=employee.to_profile())
