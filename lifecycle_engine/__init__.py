"""
Client lifecycle automation engine for the coaching platform.

Subpackages:
    domain    — pure decision logic (enums, streaks, transition table, templates)
    services  — session-bound units of work (achievements, workflow, cards, push)
    routes    — HTTP entry points
"""

__version__ = "1.0.0"
