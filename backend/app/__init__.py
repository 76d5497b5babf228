"""Revisio Application Package — study-sheet generation with tiered daily quotas.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
