"""
domain/enums.py — All domain enumerations for the client lifecycle engine.

Uses StrEnum so values serialize cleanly to JSON and can be stored directly
in TEXT columns. The achievement evaluator and the workflow transition
table are keyed by these members.
"""
from __future__ import annotations

from enum import StrEnum


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------
class AchievementCategory(StrEnum):
    """Buckets achievements are grouped under on the client dashboard."""
    CONSISTENCY = "consistency"
    MILESTONE = "milestone"
    STREAK = "streak"
    SPECIAL = "special"


class CriteriaType(StrEnum):
    """How an achievement's progress value is measured.

    Count:  MEAL_LOG_COUNT, FIRST_MEAL
    Streak: MEAL_LOG_STREAK, WEIGHT_CONSISTENCY, HYDRATION_STREAK, ACTIVITY_STREAK
    Delta:  WEIGHT_LOSS_MILESTONE
    The remaining members are catalogued but not tracked (progress stays 0).
    """
    MEAL_LOG_COUNT = "meal_log_count"
    FIRST_MEAL = "first_meal"
    MEAL_LOG_STREAK = "meal_log_streak"
    WEIGHT_CONSISTENCY = "weight_consistency"
    HYDRATION_STREAK = "hydration_streak"
    ACTIVITY_STREAK = "activity_streak"
    WEIGHT_LOSS_MILESTONE = "weight_loss_milestone"
    HYDRATION_PERFECT_WEEK = "hydration_perfect_week"
    ACTIVITY_TOTAL_MINUTES = "activity_total_minutes"
    PERFECT_WEEK = "perfect_week"
    EARLY_BIRD = "early_bird"


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------
class ServiceType(StrEnum):
    """Program a client is enrolled in; selects the transition chain."""
    CONSULTATION = "consultation"
    HUNDRED_DAYS = "hundred_days"


class WorkflowAction(StrEnum):
    """Scheduled next actions the due sweep knows how to perform."""
    SEND_HEALTH_ASSESSMENT = "send_health_assessment"
    SEND_STRESS_CARD = "send_stress_card"
    SEND_SLEEP_CARD = "send_sleep_card"
    PREPARE_ACTION_PLAN = "prepare_action_plan"


class WorkflowStage(StrEnum):
    """Known onboarding stages.

    Stages stored on a workflow row are free-form; these are the ones the
    transition table reacts to.
    """
    CONSULTATION_SCHEDULED = "consultation_scheduled"
    HEALTH_ASSESSMENT_SENT = "health_assessment_sent"
    STRESS_CARD_SENT = "stress_card_sent"
    SLEEP_CARD_SENT = "sleep_card_sent"
    ACTION_PLAN_SENT = "action_plan_sent"


class TriggerSource(StrEnum):
    """Who caused a workflow history entry when not an admin identity."""
    SYSTEM = "system"
    ADMIN = "admin"


class SweepStatus(StrEnum):
    """Per-client outcome reported by the due sweep."""
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"


# ---------------------------------------------------------------------------
# Cards, assessments & messages
# ---------------------------------------------------------------------------
class CardType(StrEnum):
    HEALTH_ASSESSMENT = "health_assessment"
    STRESS_CARD = "stress_card"
    SLEEP_CARD = "sleep_card"
    ACTION_PLAN = "action_plan"
    DIET_PLAN = "diet_plan"


class CardStatus(StrEnum):
    """Review status of a pending review card."""
    DRAFT = "draft"
    EDITED = "edited"
    SENT = "sent"


class AssessmentType(StrEnum):
    HEALTH = "health"
    STRESS = "stress"
    SLEEP = "sleep"
    CUSTOM = "custom"


class SenderType(StrEnum):
    SYSTEM = "system"
    ADMIN = "admin"
    CLIENT = "client"


class MessageType(StrEnum):
    AUTOMATED = "automated"
    MANUAL = "manual"
