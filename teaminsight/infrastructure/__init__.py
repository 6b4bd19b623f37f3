"""Infrastructure Layer - external service clients and cross-cutting concerns.

Invariants:
    - All external calls wrapped with retry/timeout/error mapping
    - Failures mapped onto core/errors.py types

Design Decisions:
    - Resilient wrappers over raw clients
"""
