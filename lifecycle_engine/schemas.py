"""
Pydantic schemas for request/response validation.
"""

from datetime import datetime
from typing import Optional, List, Any
from pydantic import BaseModel, Field


# ============================= Achievement Schemas =============================

class EvaluateAchievementsRequest(BaseModel):
    client_id: int
    action_type: Optional[str] = None


class AchievementResponse(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    badge_color: str
    category: str
    criteria_type: str
    criteria_value: int
    points: int
    is_active: Optional[bool] = True

    model_config = {"from_attributes": True}


class EarnedAchievementResponse(AchievementResponse):
    earned_at: str


class ProgressResponse(BaseModel):
    achievement_id: int
    current_value: int
    target_value: int


class EvaluateAchievementsResponse(BaseModel):
    newAchievements: List[EarnedAchievementResponse] = []
    updatedProgress: List[ProgressResponse] = []


# ============================= Workflow Schemas =============================

class SweepResult(BaseModel):
    client_id: int
    status: str  # success | error | skipped
    action: Optional[str] = None
    error: Optional[str] = None


class SweepResponse(BaseModel):
    success: bool
    processed: int
    results: List[SweepResult] = []


class TriggerStageRequest(BaseModel):
    client_id: int
    stage: str = Field(..., min_length=1, max_length=100)


class TriggerStageResponse(BaseModel):
    success: bool = True
    workflow_stage: str
    next_action: Optional[str] = None


class WorkflowHistoryResponse(BaseModel):
    id: int
    workflow_stage: Optional[str] = None
    action: Optional[str] = None
    triggered_by: str
    created_at: Optional[datetime] = None


class WorkflowChainStep(BaseModel):
    action: str
    stage: Optional[str] = None
    next_action: Optional[str] = None
    delay_seconds: Optional[int] = None


class WorkflowOverviewResponse(BaseModel):
    client_id: int
    service_type: str
    workflow_stage: Optional[str] = None
    stage_completed_at: Optional[datetime] = None
    next_action: Optional[str] = None
    next_action_due_at: Optional[datetime] = None
    upcoming: List[WorkflowChainStep] = []
    history: List[WorkflowHistoryResponse] = []


# ============================= Card Schemas =============================

class FinalizeCardRequest(BaseModel):
    card_id: int
    display_name: Optional[str] = Field(None, max_length=300)


class FinalizeCardResponse(BaseModel):
    success: bool = True
    message: str


# ============================= Client Achievement Summary =============================

class EarnedSummaryItem(AchievementResponse):
    earned_at: Optional[str] = None
    progress: Optional[Any] = None


class InProgressItem(BaseModel):
    achievement_id: int
    name: Optional[str] = None
    current_value: int
    target_value: int
    last_updated: Optional[str] = None


class ClientAchievementsResponse(BaseModel):
    client_id: int
    total_points: int
    earned: List[EarnedSummaryItem] = []
    in_progress: List[InProgressItem] = []
