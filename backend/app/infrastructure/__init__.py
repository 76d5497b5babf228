"""Infrastructure Layer — database, provider client, identity and logging adapters.

Invariants:
    - Infrastructure raises only core/errors.py types at its boundary
    - All external calls wrapped with retry/timeout/error mapping

Design Decisions:
    - Resilient wrappers over raw clients (single responsibility)
"""
