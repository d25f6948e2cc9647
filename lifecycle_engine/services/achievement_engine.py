"""
Achievement engine: evaluates gamification criteria after a client action
and awards each achievement at most once.

For every active, not-yet-earned achievement the engine measures a current
value from the client's activity history, upserts the progress snapshot and,
when the value reaches the target, appends to the award ledger. The ledger's
unique (client_id, achievement_id) constraint turns a concurrent double
award into a no-op.

A store error in any measurement aborts the whole evaluation. Achievements
processed before the failure keep their committed progress and awards.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lifecycle_engine.config import settings
from lifecycle_engine.domain.enums import CriteriaType
from lifecycle_engine.domain.streaks import calculate_streak
from lifecycle_engine.models import (
    Achievement, AchievementProgress, UserAchievement, Client, DailyLog, MealLog,
)
from lifecycle_engine.services.errors import ClientNotFound

logger = logging.getLogger(__name__)

HYDRATION_ML_PER_KCAL_FACTOR = 0.035


# ---------------------------------------------------------------------------
# Criteria context
# ---------------------------------------------------------------------------

@dataclass
class CriteriaContext:
    """Everything a criterion needs to measure one client."""
    db: Session
    client: Client
    today: date
    _cache: dict = field(default_factory=dict)

    @property
    def client_id(self) -> int:
        return self.client.id


def hydration_target_ml(target_kcal: Optional[int]) -> int:
    """Daily water target in ml: round(kcal * 0.035) * 100.

    Half values round up, so 2000 kcal -> 70 -> 7000 ml.
    """
    kcal = target_kcal or settings.DEFAULT_TARGET_KCAL
    return int(math.floor(kcal * HYDRATION_ML_PER_KCAL_FACTOR + 0.5)) * 100


# ---------------------------------------------------------------------------
# Criteria measurements
# ---------------------------------------------------------------------------

def _meal_log_count(ctx: CriteriaContext) -> int:
    return ctx.db.query(func.count(MealLog.id)).filter(
        MealLog.client_id == ctx.client_id,
    ).scalar() or 0


def _meal_log_streak(ctx: CriteriaContext) -> int:
    rows = ctx.db.query(MealLog.logged_at).filter(
        MealLog.client_id == ctx.client_id,
    ).order_by(MealLog.logged_at.desc()).limit(settings.MEAL_STREAK_LOOKBACK).all()
    return calculate_streak([r.logged_at for r in rows], today=ctx.today)


def _daily_log_streak(ctx: CriteriaContext, *conditions) -> int:
    rows = ctx.db.query(DailyLog.log_date).filter(
        DailyLog.client_id == ctx.client_id,
        *conditions,
    ).order_by(DailyLog.log_date.desc()).limit(settings.DAILY_LOG_STREAK_LOOKBACK).all()
    return calculate_streak([r.log_date for r in rows], today=ctx.today)


def _weight_consistency(ctx: CriteriaContext) -> int:
    return _daily_log_streak(ctx, DailyLog.weight.isnot(None))


def _hydration_streak(ctx: CriteriaContext) -> int:
    target = hydration_target_ml(ctx.client.target_kcal)
    return _daily_log_streak(ctx, DailyLog.water_intake >= target)


def _activity_streak(ctx: CriteriaContext) -> int:
    return _daily_log_streak(ctx, DailyLog.activity_minutes > 0)


def _weight_loss_milestone(ctx: CriteriaContext) -> int:
    """Whole kilograms lost between the first and the latest weigh-in.

    Both ends come from the client's daily-log weigh-ins. The profile value
    on clients.last_weight is not consulted, so the milestone follows logged
    history only.
    """
    weighed = ctx.db.query(DailyLog.weight).filter(
        DailyLog.client_id == ctx.client_id,
        DailyLog.weight.isnot(None),
    )
    first = weighed.order_by(DailyLog.log_date.asc(), DailyLog.id.asc()).first()
    latest = weighed.order_by(DailyLog.log_date.desc(), DailyLog.id.desc()).first()
    if first is None or latest is None:
        return 0

    # round() first so 80.1 - 77.1 counts as 3, not 2.999...
    lost = round(first.weight - latest.weight, 6)
    return max(0, math.floor(lost))


def _untracked(ctx: CriteriaContext) -> int:
    return 0


CRITERIA_EVALUATORS: dict[CriteriaType, Callable[[CriteriaContext], int]] = {
    CriteriaType.MEAL_LOG_COUNT: _meal_log_count,
    CriteriaType.FIRST_MEAL: _meal_log_count,
    CriteriaType.MEAL_LOG_STREAK: _meal_log_streak,
    CriteriaType.WEIGHT_CONSISTENCY: _weight_consistency,
    CriteriaType.HYDRATION_STREAK: _hydration_streak,
    CriteriaType.ACTIVITY_STREAK: _activity_streak,
    CriteriaType.WEIGHT_LOSS_MILESTONE: _weight_loss_milestone,
    CriteriaType.HYDRATION_PERFECT_WEEK: _untracked,
    CriteriaType.ACTIVITY_TOTAL_MINUTES: _untracked,
    CriteriaType.PERFECT_WEEK: _untracked,
    CriteriaType.EARLY_BIRD: _untracked,
}

_missing = set(CriteriaType) - set(CRITERIA_EVALUATORS)
if _missing:
    raise RuntimeError(f"No evaluator for criteria types: {sorted(_missing)}")


def measure(ctx: CriteriaContext, criteria_type: str) -> int:
    """Current progress value for one criteria type (memoised per run)."""
    try:
        criteria = CriteriaType(criteria_type)
    except ValueError:
        logger.warning(f"Unknown criteria type '{criteria_type}' — progress stays 0")
        return 0

    evaluator = CRITERIA_EVALUATORS[criteria]
    if evaluator is _untracked:
        logger.debug(f"Criteria type '{criteria}' is not tracked")

    # first_meal and meal_log_count share the same query
    key = evaluator.__name__
    if key not in ctx._cache:
        ctx._cache[key] = int(evaluator(ctx))
    return ctx._cache[key]


# ---------------------------------------------------------------------------
# Ledger writes
# ---------------------------------------------------------------------------

def _upsert_progress(
    db: Session,
    existing: Optional[AchievementProgress],
    client_id: int,
    achievement: Achievement,
    value: int,
    now: datetime,
) -> None:
    if existing is not None:
        existing.current_value = value
        existing.last_updated = now
        return

    try:
        with db.begin_nested():
            db.add(AchievementProgress(
                client_id=client_id,
                achievement_id=achievement.id,
                current_value=value,
                target_value=achievement.criteria_value,
                last_updated=now,
            ))
    except IntegrityError:
        # A concurrent evaluation inserted it first
        updated = db.query(AchievementProgress).filter(
            AchievementProgress.client_id == client_id,
            AchievementProgress.achievement_id == achievement.id,
        ).update({"current_value": value, "last_updated": now}, synchronize_session=False)
        if updated != 1:
            raise


def _record_award(db: Session, client_id: int, achievement: Achievement, value: int, now: datetime) -> bool:
    """Append to the award ledger. False if the client already holds it.

    Any other integrity failure (missing client or achievement) propagates.
    """
    try:
        with db.begin_nested():
            db.add(UserAchievement(
                client_id=client_id,
                achievement_id=achievement.id,
                earned_at=now,
                progress={"value": value},
            ))
    except IntegrityError:
        already_earned = db.query(UserAchievement.id).filter(
            UserAchievement.client_id == client_id,
            UserAchievement.achievement_id == achievement.id,
        ).first()
        if already_earned is None:
            raise
        logger.info(f"Achievement {achievement.id} already earned by client {client_id} — skipping")
        return False
    return True


def serialize_achievement(achievement: Achievement) -> dict:
    return {
        "id": achievement.id,
        "name": achievement.name,
        "description": achievement.description,
        "icon": achievement.icon,
        "badge_color": achievement.badge_color,
        "category": achievement.category,
        "criteria_type": achievement.criteria_type,
        "criteria_value": achievement.criteria_value,
        "points": achievement.points,
        "is_active": achievement.is_active,
    }


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def evaluate_achievements(
    db: Session,
    client_id: int,
    action_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Evaluate every active achievement for a client.

    Args:
        db: Database session
        client_id: Client who just acted
        action_type: Hint describing the action (logged only; every
            achievement is re-evaluated regardless)
        now: Evaluation time (default: utcnow); its date anchors streaks

    Returns:
        dict with newAchievements (definitions stamped with earned_at) and
        updatedProgress (achievement_id, current_value, target_value)
    """
    now = now or datetime.utcnow()
    logger.info(f"Checking achievements for client {client_id}, action: {action_type}")

    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise ClientNotFound(client_id)

    achievements = db.query(Achievement).filter(
        Achievement.is_active.is_(True),
    ).order_by(Achievement.id).all()

    progress_by_achievement = {
        p.achievement_id: p
        for p in db.query(AchievementProgress).filter(AchievementProgress.client_id == client_id).all()
    }
    earned_ids = {
        row.achievement_id
        for row in db.query(UserAchievement.achievement_id).filter(UserAchievement.client_id == client_id).all()
    }

    ctx = CriteriaContext(db=db, client=client, today=now.date())
    newly_earned = []
    updated_progress = []

    for achievement in achievements:
        if achievement.id in earned_ids:
            continue

        current_value = measure(ctx, achievement.criteria_type)
        should_award = current_value >= achievement.criteria_value

        _upsert_progress(
            db, progress_by_achievement.get(achievement.id),
            client_id, achievement, current_value, now,
        )
        updated_progress.append({
            "achievement_id": achievement.id,
            "current_value": current_value,
            "target_value": achievement.criteria_value,
        })

        if should_award and _record_award(db, client_id, achievement, current_value, now):
            newly_earned.append({
                **serialize_achievement(achievement),
                "earned_at": now.isoformat(),
            })
            logger.info(f"Awarded achievement: {achievement.name} to client {client_id}")

        db.commit()

    return {
        "newAchievements": newly_earned,
        "updatedProgress": updated_progress,
    }


def get_client_achievements(db: Session, client_id: int) -> dict:
    """Earned achievements and open progress for the dashboard widget."""
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise ClientNotFound(client_id)

    earned = db.query(UserAchievement).filter(
        UserAchievement.client_id == client_id,
    ).order_by(UserAchievement.earned_at.desc()).all()
    earned_ids = {e.achievement_id for e in earned}

    progress = db.query(AchievementProgress).filter(
        AchievementProgress.client_id == client_id,
    ).order_by(AchievementProgress.achievement_id).all()

    return {
        "client_id": client_id,
        "total_points": sum((e.achievement.points or 0) for e in earned),
        "earned": [
            {
                **serialize_achievement(e.achievement),
                "earned_at": e.earned_at.isoformat() if e.earned_at else None,
                "progress": e.progress,
            }
            for e in earned
        ],
        "in_progress": [
            {
                "achievement_id": p.achievement_id,
                "name": p.achievement.name if p.achievement else None,
                "current_value": p.current_value,
                "target_value": p.target_value,
                "last_updated": p.last_updated.isoformat() if p.last_updated else None,
            }
            for p in progress
            if p.achievement_id not in earned_ids
        ],
    }
