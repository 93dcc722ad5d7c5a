"""Secure Payments Portal: autenticación de empleados y autorización de transacciones."""
