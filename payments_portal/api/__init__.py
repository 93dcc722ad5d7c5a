"""Capa HTTP (FastAPI): routers, mapeo de errores y entrypoint."""
