"""Services Layer - policy resolution, session persistence and the oracle calls.

Invariants:
    - Every oracle call builds its full context payload per request (stateless)
    - Persistence is the flow's responsibility; oracle calls never write

Design Decisions:
    - One file per oracle role (controller, interviewer, finalizer) for locality
"""
