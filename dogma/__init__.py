"""
Dogma - Resumable effect engine for Innovation

A deterministic rules engine for card dogma effects. The engine provides:
- Immutable game snapshots with an append-only event log
- Primitive state operations (draw, meld, score, tuck, splay, transfer, ...)
- Icon visibility and counting for splayed stacks
- Demand targeting and dogma sharing
- A choice protocol and an executor that suspends and resumes effects
"""

__version__ = "0.1.0"
