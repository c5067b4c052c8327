"""Domain layer: token types, filters, and the token tree model.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
