"""Services Layer — quota engine, code redemption and the generation orchestrator.

Invariants:
    - Services own transaction boundaries through an injected session scope
    - Shared-row mutations go through the stores in entitlement_store.py only

Design Decisions:
    - One service per use case, composed by api/dependencies.py
"""
