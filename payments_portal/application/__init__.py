"""
===============================================================================
APPLICATION LAYER
===============================================================================

Casos de uso del portal (usecases/) y tareas de arranque (dev_seed_employee).
===============================================================================
"""
