"""
domain/workflow_table.py — Client onboarding workflow transition table.

Pure lookups, no store access. Two keyings exist:

Automatic sweep (keyed by the row's current next_action):
    hundred_days:
        send_health_assessment --> stage health_assessment_sent, next send_stress_card  (+2.5h)
        send_stress_card       --> stage stress_card_sent,       next send_sleep_card   (+3.5h)
        send_sleep_card        --> stage sleep_card_sent,        next prepare_action_plan (+2d)
        prepare_action_plan    --> (no automatic transition; the schedule is cleared)
    consultation:
        send_health_assessment --> stage health_assessment_sent  (terminal)

Manual trigger (keyed by the target stage being entered):
    consultation_scheduled --> send_health_assessment (+30m)
    health_assessment_sent --> send_stress_card (+2.5h), hundred_days only
    stress_card_sent       --> send_sleep_card (+3.5h)
    sleep_card_sent        --> prepare_action_plan (+2d)
    any other stage        --> terminal
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from lifecycle_engine.domain.enums import ServiceType, WorkflowAction, WorkflowStage
from lifecycle_engine.domain import message_templates as tpl


@dataclass(frozen=True)
class Transition:
    """What happens when a workflow hop fires.

    message_template: template to send to the client (None = no message)
    next_stage:       stage the client lands in (None = keep current stage)
    next_action:      action scheduled after this hop (None = terminal)
    delay:            time until next_action is due
    """
    message_template: Optional[str] = None
    next_stage: Optional[WorkflowStage] = None
    next_action: Optional[WorkflowAction] = None
    delay: Optional[timedelta] = None

    @property
    def is_terminal(self) -> bool:
        return self.next_action is None

    def due_at(self, now: datetime) -> Optional[datetime]:
        """Timestamp the next action becomes due, or None when terminal."""
        if self.next_action is None:
            return None
        return now + (self.delay or timedelta(0))


# Applied when the sweep meets an action with no entry for the service type.
CLEAR_SCHEDULE = Transition()

STRESS_CARD_DELAY = timedelta(hours=2.5)
SLEEP_CARD_DELAY = timedelta(hours=3.5)
ACTION_PLAN_DELAY = timedelta(days=2)
CONSULTATION_ASSESSMENT_DELAY = timedelta(minutes=30)


# ---------------------------------------------------------------------------
# Automatic sweep table, keyed by current next_action
# ---------------------------------------------------------------------------

AUTOMATIC_TRANSITIONS: dict[ServiceType, dict[WorkflowAction, Transition]] = {
    ServiceType.CONSULTATION: {
        WorkflowAction.SEND_HEALTH_ASSESSMENT: Transition(
            message_template=tpl.CONSULTATION_HEALTH_ASSESSMENT.name,
            next_stage=WorkflowStage.HEALTH_ASSESSMENT_SENT,
        ),
    },
    ServiceType.HUNDRED_DAYS: {
        WorkflowAction.SEND_HEALTH_ASSESSMENT: Transition(
            message_template=tpl.HUNDRED_DAYS_HEALTH_ASSESSMENT.name,
            next_stage=WorkflowStage.HEALTH_ASSESSMENT_SENT,
            next_action=WorkflowAction.SEND_STRESS_CARD,
            delay=STRESS_CARD_DELAY,
        ),
        WorkflowAction.SEND_STRESS_CARD: Transition(
            message_template=tpl.HUNDRED_DAYS_STRESS_CARD.name,
            next_stage=WorkflowStage.STRESS_CARD_SENT,
            next_action=WorkflowAction.SEND_SLEEP_CARD,
            delay=SLEEP_CARD_DELAY,
        ),
        WorkflowAction.SEND_SLEEP_CARD: Transition(
            message_template=tpl.HUNDRED_DAYS_SLEEP_CARD.name,
            next_stage=WorkflowStage.SLEEP_CARD_SENT,
            next_action=WorkflowAction.PREPARE_ACTION_PLAN,
            delay=ACTION_PLAN_DELAY,
        ),
    },
}


# ---------------------------------------------------------------------------
# Manual trigger table, keyed by target stage
# ---------------------------------------------------------------------------

STAGE_TRANSITIONS: dict[ServiceType, dict[WorkflowStage, Transition]] = {
    ServiceType.CONSULTATION: {
        WorkflowStage.CONSULTATION_SCHEDULED: Transition(
            next_stage=WorkflowStage.CONSULTATION_SCHEDULED,
            next_action=WorkflowAction.SEND_HEALTH_ASSESSMENT,
            delay=CONSULTATION_ASSESSMENT_DELAY,
        ),
        WorkflowStage.HEALTH_ASSESSMENT_SENT: Transition(
            next_stage=WorkflowStage.HEALTH_ASSESSMENT_SENT,
        ),
        WorkflowStage.STRESS_CARD_SENT: Transition(
            next_stage=WorkflowStage.STRESS_CARD_SENT,
            next_action=WorkflowAction.SEND_SLEEP_CARD,
            delay=SLEEP_CARD_DELAY,
        ),
        WorkflowStage.SLEEP_CARD_SENT: Transition(
            next_stage=WorkflowStage.SLEEP_CARD_SENT,
            next_action=WorkflowAction.PREPARE_ACTION_PLAN,
            delay=ACTION_PLAN_DELAY,
        ),
    },
    ServiceType.HUNDRED_DAYS: {
        WorkflowStage.CONSULTATION_SCHEDULED: Transition(
            next_stage=WorkflowStage.CONSULTATION_SCHEDULED,
            next_action=WorkflowAction.SEND_HEALTH_ASSESSMENT,
            delay=CONSULTATION_ASSESSMENT_DELAY,
        ),
        WorkflowStage.HEALTH_ASSESSMENT_SENT: Transition(
            next_stage=WorkflowStage.HEALTH_ASSESSMENT_SENT,
            next_action=WorkflowAction.SEND_STRESS_CARD,
            delay=STRESS_CARD_DELAY,
        ),
        WorkflowStage.STRESS_CARD_SENT: Transition(
            next_stage=WorkflowStage.STRESS_CARD_SENT,
            next_action=WorkflowAction.SEND_SLEEP_CARD,
            delay=SLEEP_CARD_DELAY,
        ),
        WorkflowStage.SLEEP_CARD_SENT: Transition(
            next_stage=WorkflowStage.SLEEP_CARD_SENT,
            next_action=WorkflowAction.PREPARE_ACTION_PLAN,
            delay=ACTION_PLAN_DELAY,
        ),
    },
}

# Every service type must have both tables.
for _service_type in ServiceType:
    if _service_type not in AUTOMATIC_TRANSITIONS or _service_type not in STAGE_TRANSITIONS:
        raise RuntimeError(f"Workflow tables missing service type: {_service_type}")


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def automatic_transition(service_type: str, next_action: str) -> Transition:
    """Transition for the due sweep, keyed by the row's current next_action.

    Unknown service types or actions with no entry (e.g. prepare_action_plan)
    return CLEAR_SCHEDULE: no message, stage unchanged, client becomes terminal.
    """
    service = _coerce(ServiceType, service_type)
    action = _coerce(WorkflowAction, next_action)
    if service is None or action is None:
        return CLEAR_SCHEDULE
    return AUTOMATIC_TRANSITIONS[service].get(action, CLEAR_SCHEDULE)


def stage_transition(service_type: str, stage: str) -> Transition:
    """Transition for a manual trigger into `stage`.

    Stages are free-form: an unknown stage is entered as-is and leaves the
    client terminal.
    """
    service = _coerce(ServiceType, service_type)
    known_stage = _coerce(WorkflowStage, stage)
    if service is None or known_stage is None:
        return Transition()
    return STAGE_TRANSITIONS[service].get(known_stage, Transition(next_stage=known_stage))


def describe_chain(service_type: str, start: WorkflowAction = WorkflowAction.SEND_HEALTH_ASSESSMENT) -> list[dict]:
    """Walk the automatic chain for a service type.

    Used by the workflow timeline widget to show upcoming hops.
    """
    steps = []
    action: Optional[WorkflowAction] = start
    seen: set[WorkflowAction] = set()
    while action is not None and action not in seen:
        seen.add(action)
        transition = automatic_transition(service_type, action)
        if transition is CLEAR_SCHEDULE:
            break
        steps.append({
            "action": str(action),
            "stage": str(transition.next_stage) if transition.next_stage else None,
            "next_action": str(transition.next_action) if transition.next_action else None,
            "delay_seconds": int(transition.delay.total_seconds()) if transition.delay else None,
        })
        action = transition.next_action
    return steps
