"""
Trainer Kernel - training-hours ledger for a club's weekly courses.

Derives, from independently edited schedule facts, an authoritative ledger
of which trainer worked which course-hours in which ISO week:
- Weekly trainer assignments, cancellations, holiday weeks and exceptions
- Day-level temporal gate with a global activation date
- Idempotent, conflict-safe ledger reconciliation per (course, week, year)
"""

__version__ = "0.1.0"
