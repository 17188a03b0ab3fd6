"""Modelos y entidades del dominio.

Por qué:
- Aquí viven los registros del protocolo de leases (Pydantic v2).
- El dominio no conoce HTTP ni CLI: solo conceptos del problema.
"""
