"""
SQLAlchemy ORM models for the client lifecycle engine.

Only the tables the engine reads or writes are modelled here. Activity
history (daily_logs, meal_logs) and clients are owned by the wider coaching
platform and treated as read-only by the engine.
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, Text, Date,
    DateTime, ForeignKey, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from lifecycle_engine.database import Base


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------
class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)
    user_id = Column(String(64), nullable=True)  # auth identity of the client
    status = Column(String(30), default="active")  # active | inactive | pending | completed

    target_kcal = Column(Integer, nullable=True)
    last_weight = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    workflow_state = relationship("ClientWorkflowState", back_populates="client", uselist=False)
    daily_logs = relationship("DailyLog", back_populates="client")
    meal_logs = relationship("MealLog", back_populates="client")


# ---------------------------------------------------------------------------
# Activity history (read-only for the engine)
# ---------------------------------------------------------------------------
class DailyLog(Base):
    __tablename__ = "daily_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    log_date = Column(Date, nullable=False, index=True)

    weight = Column(Float, nullable=True)           # kg
    water_intake = Column(Integer, nullable=True)   # ml
    activity_minutes = Column(Integer, nullable=True)
    steps = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    client = relationship("Client", back_populates="daily_logs")


class MealLog(Base):
    __tablename__ = "meal_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    daily_log_id = Column(Integer, ForeignKey("daily_logs.id"), nullable=True)

    meal_type = Column(String(30), nullable=False, default="snack")  # breakfast | lunch | dinner | snack
    meal_name = Column(String(200), nullable=True)
    kcal = Column(Integer, nullable=True)
    logged_at = Column(DateTime, default=datetime.utcnow, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    client = relationship("Client", back_populates="meal_logs")


# ---------------------------------------------------------------------------
# Achievement catalog & ledgers
# ---------------------------------------------------------------------------
class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    icon = Column(String(50), nullable=False, default="trophy")
    badge_color = Column(String(20), nullable=False, default="#f39c12")

    category = Column(String(30), nullable=False)       # consistency | milestone | streak | special
    criteria_type = Column(String(50), nullable=False)  # see domain.enums.CriteriaType
    criteria_value = Column(Integer, nullable=False)
    points = Column(Integer, default=10)
    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)


class AchievementProgress(Base):
    __tablename__ = "achievement_progress"
    __table_args__ = (
        UniqueConstraint("client_id", "achievement_id", name="uq_achievement_progress_client_achievement"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id"), nullable=False)

    current_value = Column(Integer, default=0)
    target_value = Column(Integer, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow)

    achievement = relationship("Achievement")


class UserAchievement(Base):
    """Append-only award ledger. One row per (client, achievement)."""
    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint("client_id", "achievement_id", name="uq_user_achievements_client_achievement"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id"), nullable=False)

    earned_at = Column(DateTime, default=datetime.utcnow)
    progress = Column(JSON, nullable=True)  # {"value": <qualifying value>}

    achievement = relationship("Achievement")


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------
class ClientWorkflowState(Base):
    __tablename__ = "client_workflow_state"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, unique=True, index=True)

    service_type = Column(String(30), nullable=False)  # consultation | hundred_days
    workflow_stage = Column(String(100), nullable=True)  # free-form stage label
    stage_completed_at = Column(DateTime, nullable=True)

    next_action = Column(String(100), nullable=True, index=True)  # None = terminal
    next_action_due_at = Column(DateTime, nullable=True, index=True)

    extra = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client", back_populates="workflow_state")


class WorkflowHistory(Base):
    """Append-only audit trail. Insertion order is the id order."""
    __tablename__ = "workflow_history"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    workflow_stage = Column(String(100), nullable=True)
    action = Column(String(200), nullable=True)
    triggered_by = Column(String(100), nullable=False, default="system")  # system | admin identity

    created_at = Column(DateTime, default=datetime.utcnow)


# ---------------------------------------------------------------------------
# Pending review cards & assessments
# ---------------------------------------------------------------------------
class PendingReviewCard(Base):
    __tablename__ = "pending_review_cards"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    card_type = Column(String(50), nullable=False)  # health_assessment | stress_card | sleep_card | action_plan | diet_plan
    generated_content = Column(JSON, nullable=False)
    status = Column(String(20), default="draft", index=True)  # draft | edited | sent
    workflow_stage = Column(String(100), nullable=False)  # stage applied to the client on send
    notes = Column(Text, nullable=True)

    ai_generated_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(100), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    assessment_type = Column(String(20), nullable=True)  # health | stress | sleep | custom
    display_name = Column(String(300), nullable=True)
    file_name = Column(String(300), nullable=True)
    ai_generated = Column(Boolean, default=False)
    assessment_data = Column(JSON, nullable=True)
    status = Column(String(30), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ---------------------------------------------------------------------------
# Messages (write-only for the engine)
# ---------------------------------------------------------------------------
class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    sender_id = Column(String(100), nullable=True)
    sender_type = Column(String(20), nullable=False)   # system | admin | client
    message_type = Column(String(20), nullable=False)  # automated | manual
    content = Column(Text, nullable=False)
    extra = Column("metadata", JSON, nullable=True)
    is_read = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
