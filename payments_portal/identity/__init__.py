"""Identidad de empleados: modelo, passwords, tokens y gate de autorización."""
