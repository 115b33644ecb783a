"""Modelos del dominio.

Por qué:
- Aquí viven los tipos que viajan por el pipeline: ubicaciones, lotes,
  cuentas y el resultado final.
- El dominio no conoce HTTP, CLI ni renderers.
"""
