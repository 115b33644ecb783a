"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el Core depende de abstracciones.
"""

from core.interfaces.source import AccountSource, RegionMapLoader, Renderer

__all__ = ["AccountSource", "RegionMapLoader", "Renderer"]
