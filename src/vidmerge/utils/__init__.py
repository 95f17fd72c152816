"""Shared utilities — pure helpers used across layers.

Rules
-----
* No business logic.
* No I/O.
* Importable by any layer.
"""
