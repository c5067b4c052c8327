"""Service layer: build planning, build orchestration, and lookups.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
