"""
domain/ — Pure decision logic for the client lifecycle engine.

Nothing here touches the store; services/ wraps these modules with
session-bound units of work.

Modules:
    enums              — All domain enumerations
    streaks            — Consecutive-day streak counting
    workflow_table     — Onboarding workflow transition table
    message_templates  — Automated message templates
"""

from lifecycle_engine.domain.enums import (
    AchievementCategory,
    CriteriaType,
    ServiceType,
    WorkflowAction,
    WorkflowStage,
    CardType,
    CardStatus,
    AssessmentType,
)

__all__ = [
    "AchievementCategory",
    "CriteriaType",
    "ServiceType",
    "WorkflowAction",
    "WorkflowStage",
    "CardType",
    "CardStatus",
    "AssessmentType",
]
