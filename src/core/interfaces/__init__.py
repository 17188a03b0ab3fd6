"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Los servicios (`core.services`) dependen del contrato, no del cliente HTTP.
"""
