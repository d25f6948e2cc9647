"""
Seed data for the lifecycle engine.
Seeds only the reference achievement catalog. Administrators retire or add
achievements afterwards; the engine never creates definitions itself.
"""

import logging
from sqlalchemy.orm import Session

from lifecycle_engine.domain.enums import AchievementCategory, CriteriaType
from lifecycle_engine.models import Achievement

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default achievement catalog
# ---------------------------------------------------------------------------
ACHIEVEMENTS = [
    {
        "name": "First Bite",
        "description": "Log your very first meal.",
        "icon": "utensils",
        "badge_color": "#2ecc71",
        "category": AchievementCategory.MILESTONE,
        "criteria_type": CriteriaType.FIRST_MEAL,
        "criteria_value": 1,
        "points": 10,
    },
    {
        "name": "Meal Tracker",
        "description": "Log 25 meals.",
        "icon": "clipboard-list",
        "badge_color": "#27ae60",
        "category": AchievementCategory.MILESTONE,
        "criteria_type": CriteriaType.MEAL_LOG_COUNT,
        "criteria_value": 25,
        "points": 25,
    },
    {
        "name": "Meal Master",
        "description": "Log 100 meals.",
        "icon": "award",
        "badge_color": "#f39c12",
        "category": AchievementCategory.MILESTONE,
        "criteria_type": CriteriaType.MEAL_LOG_COUNT,
        "criteria_value": 100,
        "points": 75,
    },
    {
        "name": "Three-Day Streak",
        "description": "Log at least one meal every day for 3 days in a row.",
        "icon": "flame",
        "badge_color": "#e67e22",
        "category": AchievementCategory.STREAK,
        "criteria_type": CriteriaType.MEAL_LOG_STREAK,
        "criteria_value": 3,
        "points": 15,
    },
    {
        "name": "Week Warrior",
        "description": "Log meals every day for a full week.",
        "icon": "calendar-check",
        "badge_color": "#e74c3c",
        "category": AchievementCategory.STREAK,
        "criteria_type": CriteriaType.MEAL_LOG_STREAK,
        "criteria_value": 7,
        "points": 40,
    },
    {
        "name": "Hydration Hero",
        "description": "Hit your daily water target 7 days in a row.",
        "icon": "droplet",
        "badge_color": "#3498db",
        "category": AchievementCategory.STREAK,
        "criteria_type": CriteriaType.HYDRATION_STREAK,
        "criteria_value": 7,
        "points": 40,
    },
    {
        "name": "Scale Regular",
        "description": "Record your weight 7 days in a row.",
        "icon": "scale",
        "badge_color": "#9b59b6",
        "category": AchievementCategory.CONSISTENCY,
        "criteria_type": CriteriaType.WEIGHT_CONSISTENCY,
        "criteria_value": 7,
        "points": 30,
    },
    {
        "name": "Keep Moving",
        "description": "Log activity 5 days in a row.",
        "icon": "activity",
        "badge_color": "#1abc9c",
        "category": AchievementCategory.CONSISTENCY,
        "criteria_type": CriteriaType.ACTIVITY_STREAK,
        "criteria_value": 5,
        "points": 30,
    },
    {
        "name": "First Kilo Down",
        "description": "Lose your first kilogram.",
        "icon": "trending-down",
        "badge_color": "#16a085",
        "category": AchievementCategory.MILESTONE,
        "criteria_type": CriteriaType.WEIGHT_LOSS_MILESTONE,
        "criteria_value": 1,
        "points": 20,
    },
    {
        "name": "Five Kilos Down",
        "description": "Lose five kilograms since your first weigh-in.",
        "icon": "trophy",
        "badge_color": "#d35400",
        "category": AchievementCategory.SPECIAL,
        "criteria_type": CriteriaType.WEIGHT_LOSS_MILESTONE,
        "criteria_value": 5,
        "points": 100,
    },
]


def seed_achievements(db: Session) -> int:
    """Insert the default catalog. Returns the number of rows added."""
    for a_data in ACHIEVEMENTS:
        db.add(Achievement(
            **{k: (v.value if hasattr(v, "value") else v) for k, v in a_data.items()},
            is_active=True,
        ))
    db.commit()
    logger.info(f"Seeded {len(ACHIEVEMENTS)} achievements.")
    return len(ACHIEVEMENTS)
