"""
services/ — Units of work against an injected SQLAlchemy session.

Modules:
    achievement_engine  — criteria evaluation and award ledger
    workflow_scheduler  — due sweep and manual stage trigger
    card_finalizer      — reviewed card release
    messaging           — automated message envelope
    push_service        — best-effort push notification dispatch
    errors              — service-layer exceptions
"""
